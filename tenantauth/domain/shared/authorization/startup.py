"""Startup validation for handler authorization declarations."""

import dataclasses
import logging

from tenantauth.domain.shared.authorization.gate import Gate, RequirePermission
from tenantauth.domain.shared.command import CommandHandler
from tenantauth.domain.shared.error import ConfigurationError
from tenantauth.domain.shared.query import QueryHandler

logger = logging.getLogger(__name__)


def _all_subclasses(cls: type) -> list[type]:
    found: list[type] = []
    for sub in cls.__subclasses__():
        found.append(sub)
        found.extend(_all_subclasses(sub))
    return found


def _check_handler_class(handler_cls: type) -> None:
    """Check a single handler class for a usable __auth__ declaration.

    Raises ConfigurationError if the handler lacks a Gate, or requires a
    permission without declaring the resolver that checks it.
    """
    gate = getattr(handler_cls, "__auth__", None)
    if not isinstance(gate, Gate):
        raise ConfigurationError(f"Handler {handler_cls.__name__} has no __auth__ declaration")

    field_names = {f.name for f in dataclasses.fields(handler_cls)}
    if "principal" not in field_names:
        raise ConfigurationError(f"Handler {handler_cls.__name__} has no principal field")
    if isinstance(gate, RequirePermission) and "authorization" not in field_names:
        raise ConfigurationError(
            f"Handler {handler_cls.__name__} requires {gate.permission} "
            f"but has no authorization field"
        )


def validate_all_handlers() -> None:
    """Scan all registered CommandHandler and QueryHandler subclasses.

    Raises ConfigurationError listing every handler with a broken declaration.
    """
    violations: list[str] = []

    for handler_cls in _all_subclasses(CommandHandler) + _all_subclasses(QueryHandler):
        if not handler_cls.__module__.startswith("tenantauth."):
            continue
        try:
            _check_handler_class(handler_cls)
        except ConfigurationError as e:
            violations.append(str(e))

    if violations:
        raise ConfigurationError(
            f"Authorization validation failed for {len(violations)} handler(s):\n"
            + "\n".join(f"  - {v}" for v in violations)
        )

    logger.info("Authorization startup validation passed for all handlers")
