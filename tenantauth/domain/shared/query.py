"""Query and QueryHandler base classes with authorization gate."""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from functools import wraps
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar, dataclass_transform

from pydantic import BaseModel

from tenantauth.domain.shared.authorization.gate import enforce

if TYPE_CHECKING:
    from tenantauth.domain.shared.authorization.gate import Gate
    from tenantauth.domain.shared.authorization.lock import LockRequest


class Query(BaseModel): ...


class Result(BaseModel): ...


Q = TypeVar("Q", bound=Query)
R = TypeVar("R", bound=Result)

_HandlerMethod = Callable[..., Coroutine[Any, Any, Any]]


def _wrap_query_run_with_auth(original_run: _HandlerMethod) -> _HandlerMethod:
    @wraps(original_run)
    async def auth_wrapped_run(self: Any, query: Any) -> Any:
        await enforce(
            getattr(type(self), "__auth__", None),
            getattr(self, "principal", None),
            getattr(self, "authorization", None),
            type(self).__name__,
        )
        return await original_run(self, query)

    return auth_wrapped_run


@dataclass_transform()
class _QueryHandlerMeta(ABCMeta):
    """Metaclass that combines ABC with auto-dataclass and __auth__ gate for subclasses."""

    def __new__(mcs, name: str, bases: tuple[type, ...], namespace: dict[str, Any]):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            cls = dataclass(cls)

            original_run = cls.__dict__.get("run")
            if original_run is not None:
                cls.run = _wrap_query_run_with_auth(original_run)

        return cls


class QueryHandler(Generic[Q, R], metaclass=_QueryHandlerMeta):
    """Base class for query handlers. Subclasses are automatically dataclasses.

    Declare __auth__ to enforce access:
        class MyHandler(QueryHandler[MyQuery, MyResult]):
            __auth__ = requires(Permission.USERS_READ)
            principal: Principal
            authorization: AuthorizationResolver
    """

    __auth__: ClassVar[Gate]
    __lock__: ClassVar[LockRequest | None] = None

    @abstractmethod
    async def run(self, query: Q) -> R: ...
