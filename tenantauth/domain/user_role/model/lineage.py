"""Lineage (organization -> merchant -> profile) and the scope dominance rule."""

from enum import IntEnum
from typing import Annotated

from pydantic import Field

from tenantauth.domain.shared.error import InvalidScopeError
from tenantauth.domain.shared.model.value import ValueObject


class EntityType(IntEnum):
    """Scope levels with numeric ordering.

    A higher value dominates every lower value. Gaps allow future levels
    (e.g. tenant above organization) without renumbering.
    """

    PROFILE = 10
    MERCHANT = 20
    ORGANIZATION = 30

    @property
    def label(self) -> str:
        return self.name.lower()


# Non-empty and free of the "/" used when a lineage is rendered as a path
EntityId = Annotated[str, Field(min_length=1, max_length=64, pattern=r"^[^/\s]+$")]


class Lineage(ValueObject):
    """Position in the organizational hierarchy.

    Invariants:
    - `profile_id` is only meaningful together with `merchant_id`
    - The deepest id present determines the entity type
    """

    org_id: EntityId
    merchant_id: EntityId | None = None
    profile_id: EntityId | None = None

    @property
    def entity_type(self) -> EntityType:
        if self.profile_id is not None:
            if self.merchant_id is None:
                raise InvalidScopeError(
                    "A profile lineage requires a merchant id",
                    code="profile_without_merchant",
                )
            return EntityType.PROFILE
        if self.merchant_id is not None:
            return EntityType.MERCHANT
        return EntityType.ORGANIZATION

    def require_shape(self, scope: EntityType) -> None:
        """Raise InvalidScopeError unless the lineage has exactly the ids `scope` needs."""
        if self.entity_type is not scope:
            raise InvalidScopeError(
                f"A {scope.label}-scoped lineage needs exactly the ids up to {scope.label}, "
                f"got a {self.entity_type.label} lineage",
                code="lineage_scope_mismatch",
            )

    def bounded_to(self, scope: EntityType) -> "Lineage":
        """Truncate to the ids that define a boundary at `scope`."""
        if scope is EntityType.ORGANIZATION:
            return Lineage(org_id=self.org_id)
        if self.merchant_id is None:
            raise InvalidScopeError(
                f"A {scope.label} boundary requires a merchant id",
                code="lineage_scope_mismatch",
            )
        if scope is EntityType.MERCHANT:
            return Lineage(org_id=self.org_id, merchant_id=self.merchant_id)
        if self.profile_id is None:
            raise InvalidScopeError(
                "A profile boundary requires a profile id",
                code="lineage_scope_mismatch",
            )
        return self

    def is_within(self, boundary: "Lineage") -> bool:
        """True if this lineage lies at or below `boundary`."""
        if self.org_id != boundary.org_id:
            return False
        if boundary.merchant_id is not None and self.merchant_id != boundary.merchant_id:
            return False
        if boundary.profile_id is not None and self.profile_id != boundary.profile_id:
            return False
        return True

    def is_related(self, other: "Lineage") -> bool:
        """True if one lineage is an ancestor of (or equal to) the other."""
        return self.is_within(other) or other.is_within(self)

    def __str__(self) -> str:
        return "/".join(p for p in (self.org_id, self.merchant_id, self.profile_id) if p)


def dominates(
    actor_scope: EntityType,
    actor_lineage: Lineage,
    target_scope: EntityType,
    target_lineage: Lineage,
) -> bool:
    """The single authorization primitive for acting on scoped records.

    The actor's scope level must be at least the target's, and the target
    lineage must lie within the actor's boundary (its lineage cut at its own
    scope level).
    """
    if actor_scope < target_scope:
        return False
    return target_lineage.is_within(actor_lineage.bounded_to(actor_scope))
