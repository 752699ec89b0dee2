from dishka import Provider as DishkaProvider

from tenantauth.util.di.scope import Scope


class Provider(DishkaProvider):
    """Base for all DI providers. Unscoped factories default to the unit of work."""

    scope = Scope.UOW
