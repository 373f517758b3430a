"""Custom GraphQL scalars.

Learn: Record ids are UUIDs internally and 32-char hex strings on the
wire. Each kind of id gets its own scalar so a ProjectID can't be passed
where a TaskID is expected. Malformed ids fail input coercion with
BAD_USER_INPUT before any resolver runs.

UserPassword applies the password strength policy at the input boundary,
so a weak password never reaches the sign-up resolver.
"""

import uuid
from typing import NewType

import strawberry

from taskboard.auth.password import validate_password_strength
from taskboard.ids import as_uuid, to_hex

UserID = strawberry.scalar(
    NewType("UserID", uuid.UUID),
    serialize=to_hex,
    parse_value=as_uuid,
    description="User identifier (hex UUID)",
)

ProjectID = strawberry.scalar(
    NewType("ProjectID", uuid.UUID),
    serialize=to_hex,
    parse_value=as_uuid,
    description="Project identifier (hex UUID)",
)

TaskID = strawberry.scalar(
    NewType("TaskID", uuid.UUID),
    serialize=to_hex,
    parse_value=as_uuid,
    description="Task identifier (hex UUID)",
)

UserPassword = strawberry.scalar(
    NewType("UserPassword", str),
    serialize=lambda value: "********",
    parse_value=validate_password_strength,
    description=(
        "Password of at least 8 characters with a lowercase letter, "
        "an uppercase letter, a digit and a symbol"
    ),
)
