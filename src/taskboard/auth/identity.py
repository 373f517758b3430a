"""Per-request identity.

Learn: This is the unified auth context. It is built exactly once per
request from the session cookie and is frozen afterwards. Logging in or
out changes the *session* for later requests, never the identity of the
request that did it.
"""

import enum
import uuid
from dataclasses import dataclass, field
from typing import Iterable, Optional


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    USER = "USER"


def parse_roles(values: Iterable[str]) -> frozenset[Role]:
    """Turn stored role tags into Role members, skipping unknown tags."""
    known = {r.value for r in Role}
    return frozenset(Role(v) for v in values if v in known)


@dataclass(frozen=True)
class IdentityContext:
    """The principal making the request: user id (None if anonymous) + roles."""

    user_id: Optional[uuid.UUID] = None
    roles: frozenset[Role] = field(default_factory=frozenset)

    @classmethod
    def anonymous(cls) -> "IdentityContext":
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def has_role(self, role: Role) -> bool:
        return role in self.roles
