"""Dishka FastAPI integration using Scope.UOW."""

from dishka import AsyncContainer
from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from tenantauth.util.di.scope import Scope as AppScope


class ContainerMiddleware:
    """ASGI middleware that opens a Scope.UOW container for each HTTP request.

    A custom version of dishka.integrations.starlette.ContainerMiddleware that
    uses Scope.UOW instead of dishka.Scope.REQUEST. The container closes after
    the response has been sent, so it only releases the session; command
    handlers commit through UnitOfWork before the response is built.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        request = Request(scope, receive=receive, send=send)
        async with request.app.state.dishka_container(
            {Request: request},
            scope=AppScope.UOW,
        ) as request_container:
            request.state.dishka_container = request_container
            return await self.app(scope, receive, send)


def setup_dishka(container: AsyncContainer, app) -> None:
    """Install the UOW middleware and attach the root container to the app."""
    app.add_middleware(ContainerMiddleware)
    app.state.dishka_container = container
