"""In-memory ports and service fixtures for user-role tests."""

from collections.abc import AsyncIterator, Callable

import pytest

from tenantauth.domain.shared.audit import AuditTrail
from tenantauth.domain.shared.error import AlreadyExistsError
from tenantauth.domain.shared.event import Event, EventId
from tenantauth.domain.user_role.model.catalog import PermissionCatalog
from tenantauth.domain.user_role.model.lineage import EntityType, Lineage
from tenantauth.domain.user_role.model.principal import TokenPurpose
from tenantauth.domain.user_role.model.role import Role
from tenantauth.domain.user_role.model.user_role import UserRole, UserRoleStatus
from tenantauth.domain.user_role.model.value import RoleId, TokenId, UserId
from tenantauth.domain.user_role.service.authorization import AuthorizationResolver
from tenantauth.domain.user_role.service.invitation import InvitationService, ReinvitePolicy
from tenantauth.domain.user_role.service.lineage import LineageDirectory
from tenantauth.domain.user_role.service.role import RoleService


class InMemoryRoleRepository:
    def __init__(self) -> None:
        self.roles: dict[str, Role] = {}

    async def get(self, role_id: RoleId, org_id: str) -> Role | None:
        role = self.roles.get(role_id)
        if role is None or role.lineage is None or role.lineage.org_id != org_id:
            return None
        return role.model_copy(deep=True)

    async def save(self, role: Role) -> None:
        assert role.lineage is not None
        for other in self.roles.values():
            if (
                other.role_id != role.role_id
                and other.lineage is not None
                and other.lineage.org_id == role.lineage.org_id
                and other.name.lower() == role.name.lower()
            ):
                raise AlreadyExistsError("duplicate", code="role_name_taken")
        self.roles[role.role_id] = role.model_copy(deep=True)

    async def find_by_name(self, org_id: str, name: str) -> Role | None:
        for role in self.roles.values():
            if (
                role.lineage is not None
                and role.lineage.org_id == org_id
                and role.name.lower() == name.strip().lower()
            ):
                return role.model_copy(deep=True)
        return None

    async def list_related(self, lineage: Lineage, max_scope: EntityType) -> list[Role]:
        return [
            r.model_copy(deep=True)
            for r in self.roles.values()
            if r.lineage is not None
            and r.lineage.org_id == lineage.org_id
            and r.scope_level <= max_scope
            and r.lineage.is_related(lineage)
        ]


class InMemoryUserRoleRepository:
    def __init__(self) -> None:
        self.bindings: dict[tuple[str, str], UserRole] = {}

    async def get(self, user_id: UserId, lineage: Lineage) -> UserRole | None:
        binding = self.bindings.get((user_id, str(lineage)))
        return binding.model_copy(deep=True) if binding else None

    async def add(self, binding: UserRole) -> None:
        key = (binding.user_id, str(binding.lineage))
        if key in self.bindings:
            raise AlreadyExistsError("duplicate", code="user_role_exists")
        self.bindings[key] = binding.model_copy(deep=True)

    async def update(self, binding: UserRole) -> None:
        stored = self.bindings[(binding.user_id, str(binding.lineage))]
        stored.role_id = binding.role_id
        stored.last_modified_by = binding.last_modified_by

    async def activate(self, user_id: UserId, lineage: Lineage) -> bool:
        binding = self.bindings.get((user_id, str(lineage)))
        if binding is None or binding.status is not UserRoleStatus.INVITED:
            return False
        binding.status = UserRoleStatus.ACTIVE
        return True

    async def delete(self, user_id: UserId, lineage: Lineage) -> bool:
        return self.bindings.pop((user_id, str(lineage)), None) is not None

    async def list_invited(self, user_id: UserId) -> list[UserRole]:
        return [
            b.model_copy(deep=True)
            for b in self.bindings.values()
            if b.user_id == user_id and b.status is UserRoleStatus.INVITED
        ]

    async def stream_within(self, boundary: Lineage) -> AsyncIterator[UserRole]:
        for key in sorted(self.bindings):
            binding = self.bindings[key]
            if binding.lineage.is_within(boundary):
                yield binding.model_copy(deep=True)

    def put(
        self,
        user_id: str,
        role_id: str,
        lineage: Lineage,
        status: UserRoleStatus = UserRoleStatus.ACTIVE,
    ) -> None:
        """Seed a binding directly."""
        self.bindings[(user_id, str(lineage))] = UserRole(
            user_id=UserId(user_id),
            role_id=RoleId(role_id),
            lineage=lineage,
            status=status,
            created_by=UserId("seed"),
            last_modified_by=UserId("seed"),
        )


class InMemoryTokenLedger:
    def __init__(self) -> None:
        self.consumed: set[str] = set()

    async def consume(self, token_id: TokenId, user_id: UserId, purpose: TokenPurpose) -> bool:
        if token_id in self.consumed:
            return False
        self.consumed.add(token_id)
        return True


class InMemoryEventRepository:
    def __init__(self) -> None:
        self.events: list[Event] = []

    async def append(self, event: Event) -> None:
        self.events.append(event)

    async def get(self, event_id: EventId) -> Event | None:
        return next((e for e in self.events if e.id == event_id), None)

    def of_type(self, cls: type[Event]) -> list[Event]:
        return [e for e in self.events if isinstance(e, cls)]


@pytest.fixture
def catalog() -> PermissionCatalog:
    return PermissionCatalog.default()


@pytest.fixture
def role_repo() -> InMemoryRoleRepository:
    return InMemoryRoleRepository()


@pytest.fixture
def user_role_repo() -> InMemoryUserRoleRepository:
    return InMemoryUserRoleRepository()


@pytest.fixture
def token_ledger() -> InMemoryTokenLedger:
    return InMemoryTokenLedger()


@pytest.fixture
def event_repo() -> InMemoryEventRepository:
    return InMemoryEventRepository()


@pytest.fixture
def audit(event_repo: InMemoryEventRepository) -> AuditTrail:
    return AuditTrail(_repo=event_repo)


@pytest.fixture
def resolver(
    catalog: PermissionCatalog, role_repo: InMemoryRoleRepository
) -> AuthorizationResolver:
    return AuthorizationResolver(_catalog=catalog, _role_repo=role_repo)


@pytest.fixture
def role_service(
    resolver: AuthorizationResolver,
    catalog: PermissionCatalog,
    role_repo: InMemoryRoleRepository,
    user_role_repo: InMemoryUserRoleRepository,
    audit: AuditTrail,
) -> RoleService:
    return RoleService(
        _authorization=resolver,
        _catalog=catalog,
        _role_repo=role_repo,
        _user_role_repo=user_role_repo,
        _audit=audit,
    )


@pytest.fixture
def make_invitation_service(
    resolver: AuthorizationResolver,
    catalog: PermissionCatalog,
    user_role_repo: InMemoryUserRoleRepository,
    token_ledger: InMemoryTokenLedger,
    audit: AuditTrail,
) -> Callable[..., InvitationService]:
    def _make(policy: ReinvitePolicy = ReinvitePolicy.REJECT) -> InvitationService:
        return InvitationService(
            _authorization=resolver,
            _catalog=catalog,
            _user_role_repo=user_role_repo,
            _token_ledger=token_ledger,
            _audit=audit,
            _reinvite_policy=policy,
        )

    return _make


@pytest.fixture
def invitation_service(
    make_invitation_service: Callable[..., InvitationService],
) -> InvitationService:
    return make_invitation_service()


@pytest.fixture
def directory(
    resolver: AuthorizationResolver, user_role_repo: InMemoryUserRoleRepository
) -> LineageDirectory:
    return LineageDirectory(_authorization=resolver, _user_role_repo=user_role_repo)
