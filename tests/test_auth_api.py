"""Auth API tests: sign-up, login, logout over real session cookies.

Learn: These use `cookie_client`, which does NOT override get_identity.
The identity comes from the `sid` cookie set by login, carried by httpx's
cookie jar, and resolved against the sessions table like in production.
"""

import pytest
from sqlalchemy import func, select

from taskboard.config import settings
from taskboard.db.models import User

from conftest import STRONG_PASSWORD, error_codes

SIGN_UP = """
mutation ($username: String!, $password: UserPassword!) {
  user { signUp(input: {username: $username, password: $password}) {
    recordId record { username roles }
  } }
}
"""

LOGIN = """
mutation ($username: String!, $password: String!) {
  auth { login(input: {username: $username, password: $password}) {
    recordId query { __typename }
  } }
}
"""

LOGOUT = "mutation { auth { logout { query { __typename } } } }"

ME = "query ($id: UserID!) { user(id: $id) { username } }"


async def count_users(sessions) -> int:
    async with sessions() as db:
        return (await db.execute(select(func.count()).select_from(User))).scalar_one()


@pytest.mark.asyncio
async def test_sign_up(cookie_gql):
    body = await cookie_gql(SIGN_UP, {"username": "carol", "password": STRONG_PASSWORD})
    assert "errors" not in body, body
    record = body["data"]["user"]["signUp"]["record"]
    assert record == {"username": "carol", "roles": ["USER"]}
    assert len(body["data"]["user"]["signUp"]["recordId"]) == 32


@pytest.mark.asyncio
async def test_weak_password_sign_up_writes_nothing(cookie_gql, sessions, alice):
    before = await count_users(sessions)

    body = await cookie_gql(SIGN_UP, {"username": "carol", "password": "abc"})

    assert error_codes(body) == ["BAD_USER_INPUT"]
    assert "Password too weak" in body["errors"][0]["message"]
    assert await count_users(sessions) == before


@pytest.mark.asyncio
async def test_duplicate_sign_up_conflicts(cookie_gql, alice):
    body = await cookie_gql(SIGN_UP, {"username": "alice", "password": STRONG_PASSWORD})
    assert error_codes(body) == ["CONFLICT"]


@pytest.mark.asyncio
async def test_login_sets_cookie_and_authenticates_later_requests(
    cookie_client, cookie_gql, alice
):
    # Anonymous before login
    body = await cookie_gql(ME, {"id": alice.id.hex})
    assert error_codes(body) == ["UNAUTHENTICATED"]

    resp = await cookie_client.post(
        "/graphql",
        json={"query": LOGIN, "variables": {"username": "alice", "password": STRONG_PASSWORD}},
    )
    set_cookie = resp.headers["set-cookie"]
    assert set_cookie.startswith(f"{settings.session_cookie_name}=")
    assert "httponly" in set_cookie.lower()
    login = resp.json()["data"]["auth"]["login"]
    assert login["recordId"] == alice.id.hex
    assert login["query"] == {"__typename": "Query"}

    body = await cookie_gql(ME, {"id": alice.id.hex})
    assert body["data"]["user"] == {"username": "alice"}


@pytest.mark.asyncio
async def test_logout_ends_session(cookie_gql, alice):
    await cookie_gql(LOGIN, {"username": "alice", "password": STRONG_PASSWORD})
    assert (await cookie_gql(ME, {"id": alice.id.hex}))["data"]["user"] is not None

    body = await cookie_gql(LOGOUT)
    assert body["data"]["auth"]["logout"]["query"] == {"__typename": "Query"}

    body = await cookie_gql(ME, {"id": alice.id.hex})
    assert error_codes(body) == ["UNAUTHENTICATED"]


@pytest.mark.asyncio
async def test_login_failures_share_one_message(cookie_gql, alice):
    wrong_pw = await cookie_gql(LOGIN, {"username": "alice", "password": "Wr0ng!pass"})
    no_user = await cookie_gql(LOGIN, {"username": "nobody", "password": STRONG_PASSWORD})

    for body in (wrong_pw, no_user):
        assert error_codes(body) == ["UNAUTHENTICATED"]
        assert body["errors"][0]["message"] == "Wrong username or password"
