"""
User identity.

A username is the lookup key for one ledger. It is case-sensitive,
never mutated, and never reused after a rename.
"""

from typing import Annotated

from pydantic import StringConstraints, TypeAdapter

USERNAME_PATTERN = r"^[A-Za-z0-9_.-]{1,64}$"

Username = Annotated[str, StringConstraints(pattern=USERNAME_PATTERN)]

_username_adapter = TypeAdapter(Username)


def validate_username(value: str) -> str:
    """Return `value` if it is a valid username, raise ValueError otherwise."""
    return _username_adapter.validate_python(value)
