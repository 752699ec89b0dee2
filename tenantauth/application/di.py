from dishka import AsyncContainer, from_context, make_async_container

from tenantauth.config import Config
from tenantauth.domain.user_role.model.catalog import PermissionCatalog
from tenantauth.domain.user_role.util.di import UserRoleProvider
from tenantauth.infrastructure.persistence.di import PersistenceProvider
from tenantauth.infrastructure.token.di import TokenProvider
from tenantauth.util.di.base import Provider
from tenantauth.util.di.scope import Scope


class AppContextProvider(Provider):
    """Values built before the container: configuration and the permission catalog."""

    config = from_context(provides=Config, scope=Scope.APP)
    catalog = from_context(provides=PermissionCatalog, scope=Scope.APP)


def create_container(
    config: Config | None = None, catalog: PermissionCatalog | None = None
) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]
    catalog = catalog or PermissionCatalog.default()

    return make_async_container(
        AppContextProvider(),
        PersistenceProvider(),
        TokenProvider(),
        UserRoleProvider(),
        context={Config: config, PermissionCatalog: catalog},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
