"""User-role domain models."""

from .catalog import GroupInfo, ParentGroupInfo, PermissionCatalog
from .lineage import EntityType, Lineage, dominates
from .permission import ParentGroup, Permission, PermissionGroup
from .principal import Principal, TokenPurpose
from .role import Role, RoleSummary
from .token import (
    IntermediateTokenDescriptor,
    InvitationContext,
    MerchantChoice,
    SessionDescriptor,
)
from .user_role import UserRole, UserRoleStatus
from .value import RoleId, TokenId, UserId

__all__ = [
    "EntityType",
    "GroupInfo",
    "IntermediateTokenDescriptor",
    "InvitationContext",
    "Lineage",
    "MerchantChoice",
    "ParentGroup",
    "ParentGroupInfo",
    "Permission",
    "PermissionCatalog",
    "PermissionGroup",
    "Principal",
    "Role",
    "RoleId",
    "RoleSummary",
    "SessionDescriptor",
    "TokenId",
    "TokenPurpose",
    "UserId",
    "UserRole",
    "UserRoleStatus",
    "dominates",
]
