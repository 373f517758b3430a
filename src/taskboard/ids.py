"""Record identifiers.

Ids are UUIDs in storage and 32-char lowercase hex strings on the wire.
Everything that compares or looks up ids goes through ``as_uuid`` so a
string and a UUID naming the same record are the same key.
"""

import uuid
from typing import Union

from taskboard.errors import InvalidInputError

IdLike = Union[uuid.UUID, str]


def new_id() -> uuid.UUID:
    return uuid.uuid4()


def as_uuid(value: IdLike) -> uuid.UUID:
    """Normalize a wire or storage id to ``uuid.UUID``.

    Raises InvalidInputError for anything that is not a UUID in hex or
    dashed form.
    """
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError, AttributeError):
        raise InvalidInputError(f"Value is not a valid id: {value!r}")


def to_hex(value: IdLike) -> str:
    return as_uuid(value).hex
