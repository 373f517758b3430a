#!/usr/bin/env python3
"""
Taskboard Quickstart: full lifecycle in one script.

Signs up → logs in → creates a project → adds tasks → edits them in one
batch → lists with a due-date filter → removes and deletes → logs out.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:4000
"""

import sys
import uuid

import httpx

BASE = "http://localhost:4000"
PASSWORD = "Quick!start1"


def gql(client: httpx.Client, query: str, **variables) -> dict:
    resp = client.post("/graphql", json={"query": query, "variables": variables})
    body = resp.json()
    if body.get("errors"):
        for err in body["errors"]:
            print(f"   ✗ {err['extensions']['code']}: {err['message']}")
        sys.exit(1)
    return body["data"]


def main():
    run_id = uuid.uuid4().hex[:6]
    username = f"demo-{run_id}"
    # The client keeps the session cookie between requests
    client = httpx.Client(base_url=BASE, timeout=10)

    # ── Health check ──────────────────────────────────────────────
    print("Checking backend health...")
    try:
        health = client.get("/health").json()
    except httpx.HTTPError:
        print(f"Backend not reachable at {BASE}")
        sys.exit(1)
    print(f"  Database: {health['database']}")
    print(f"  Redis:    {health['redis']}")

    # ── Sign up + log in ──────────────────────────────────────────
    print(f"\n1. Signing up {username}...")
    data = gql(client, """
        mutation ($username: String!, $password: UserPassword!) {
          user { signUp(input: {username: $username, password: $password}) { recordId } }
        }
    """, username=username, password=PASSWORD)
    user_id = data["user"]["signUp"]["recordId"]
    print(f"   User: {user_id[:8]}...")

    print("\n2. Logging in...")
    gql(client, """
        mutation ($username: String!, $password: String!) {
          auth { login(input: {username: $username, password: $password}) { recordId } }
        }
    """, username=username, password=PASSWORD)
    print(f"   Session cookie set: {'sid' in client.cookies}")

    # ── Project ───────────────────────────────────────────────────
    print("\n3. Creating project...")
    data = gql(client, """
        mutation ($name: String!) { project { add(input: {name: $name}) { recordId } } }
    """, name="Inbox")
    project_id = data["project"]["add"]["recordId"]
    print(f"   Project: Inbox ({project_id[:8]}...)")

    # ── Tasks ─────────────────────────────────────────────────────
    print("\n4. Adding tasks...")
    task_ids = []
    for title, due in [
        ("Buy milk", "2030-03-15T09:00:00Z"),
        ("Call plumber", "2030-03-15T17:30:00Z"),
        ("File taxes", "2030-04-01T12:00:00Z"),
    ]:
        data = gql(client, """
            mutation ($input: TaskAddInput!) { task { add(input: $input) { recordId } } }
        """, input={"title": title, "projectId": project_id, "dueDate": due})
        task_ids.append(data["task"]["add"]["recordId"])
        print(f"   + {title} (due {due[:10]})")

    print("\n5. Completing two tasks in one batch (plus one bogus id)...")
    data = gql(client, """
        mutation ($input: [TaskEditInput!]!) {
          task { edit(input: $input) { recordIdCollection } }
        }
    """, input=[
        {"id": task_ids[0], "isCompleted": True},
        {"id": task_ids[1], "isCompleted": True},
        {"id": uuid.uuid4().hex, "isCompleted": True},
    ])
    ids = data["task"]["edit"]["recordIdCollection"]
    print(f"   Updated: {sum(1 for i in ids if i)} / {len(ids)} (missing → null)")

    print("\n6. Tasks due 2030-03-15, earliest first...")
    data = gql(client, """
        {
          taskCollection(filter: {dueDate: "2030-03-15"}, sort: DUE_DATE_ASC) {
            title isCompleted project { name }
          }
        }
    """)
    for task in data["taskCollection"]:
        mark = "✓" if task["isCompleted"] else " "
        print(f"   [{mark}] {task['title']} ({task['project']['name']})")

    # ── Remove / delete ───────────────────────────────────────────
    print("\n7. Soft-removing and deleting...")
    gql(client, """
        mutation ($id: TaskID!) { task { remove(input: {id: $id}) { recordId } } }
    """, id=task_ids[2])
    gql(client, """
        mutation ($id: TaskID!) { task { delete(input: {id: $id}) { recordId } } }
    """, id=task_ids[0])
    data = gql(client, "{ taskCollection(filter: {isRemoved: false}) { title } }")
    print(f"   Remaining: {[t['title'] for t in data['taskCollection']]}")

    # ── Log out ───────────────────────────────────────────────────
    print("\n8. Logging out...")
    gql(client, "mutation { auth { logout { query { __typename } } } }")
    print("   Done.")


if __name__ == "__main__":
    main()
