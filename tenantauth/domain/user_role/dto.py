"""Wire shapes shared by user-role commands and queries."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from tenantauth.domain.user_role.model.catalog import GroupInfo
from tenantauth.domain.user_role.model.lineage import EntityType, Lineage
from tenantauth.domain.user_role.model.role import Role
from tenantauth.domain.user_role.model.token import MerchantChoice

ScopeName = Literal["organization", "merchant", "profile"]


def parse_scope(name: ScopeName) -> EntityType:
    return EntityType[name.upper()]


class RoleDTO(BaseModel):
    role_id: str
    name: str
    groups: list[str]
    scope_level: ScopeName
    lineage: Lineage | None
    is_invitable: bool
    is_predefined: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_role(cls, role: Role) -> "RoleDTO":
        return cls(
            role_id=role.role_id,
            name=role.name,
            groups=[str(g) for g in role.groups],
            scope_level=role.scope_level.label,  # type: ignore[arg-type]
            lineage=role.lineage,
            is_invitable=role.is_invitable,
            is_predefined=role.is_predefined,
            created_at=role.created_at,
            updated_at=role.updated_at,
        )


class GroupInfoDTO(BaseModel):
    group: str
    parent: str
    description: str
    permissions: list[str]

    @classmethod
    def from_info(cls, info: GroupInfo) -> "GroupInfoDTO":
        return cls(
            group=info.group,
            parent=info.parent,
            description=info.description,
            permissions=sorted(info.permissions),
        )


class MerchantChoiceDTO(BaseModel):
    merchant_id: str
    org_id: str
    role_id: str
    role_name: str

    @classmethod
    def from_choice(cls, choice: MerchantChoice) -> "MerchantChoiceDTO":
        return cls(**choice.model_dump())
