"""Value types for the user-role domain."""

from typing import NewType
from uuid import uuid4

UserId = NewType("UserId", str)
RoleId = NewType("RoleId", str)
TokenId = NewType("TokenId", str)


def new_role_id() -> RoleId:
    """Generate an id for a custom role. Predefined role ids never use this prefix."""
    return RoleId(f"role_{uuid4().hex}")


def new_token_id() -> TokenId:
    return TokenId(uuid4().hex)
