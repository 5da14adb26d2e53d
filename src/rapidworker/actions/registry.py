"""Maps action names and database dialects to their implementations."""
from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Type

import httpx

from .base import BaseAction
from .database import (
    DatabaseAction,
    MssqlDatabase,
    MySqlDatabase,
    PostgresqlDatabase,
    SqliteDatabase,
)
from .faker import FakerGenerate
from .http import HttpAction, http_method_action

ActionFactory = Callable[..., BaseAction]


class ConfigurationError(ValueError):
    """Raised when a job names an action or dialect this worker does not know."""
    pass


DIALECTS: Dict[str, Type[DatabaseAction]] = {
    "mysql": MySqlDatabase,
    "postgresql": PostgresqlDatabase,
    "mssql": MssqlDatabase,
    "sqlite": SqliteDatabase,
}


def resolve_dialect(dialect: Any) -> Optional[Type[DatabaseAction]]:
    if not isinstance(dialect, str):
        return None
    return DIALECTS.get(dialect.lower())


def _database_action(parameters: Optional[Dict[str, Any]] = None, client=None) -> DatabaseAction:
    parameters = parameters or {}
    cls = resolve_dialect(parameters.get("dialect"))
    if cls is None:
        raise ConfigurationError(
            f"Unknown database dialect {parameters.get('dialect')!r}. "
            f"Known dialects: {sorted(DIALECTS)}"
        )
    return cls(parameters)


def _http_action(parameters: Optional[Dict[str, Any]] = None, client=None) -> HttpAction:
    return HttpAction(parameters, client=client)


def _faker_action(parameters: Optional[Dict[str, Any]] = None, client=None) -> FakerGenerate:
    return FakerGenerate(parameters)


ACTIONS: Dict[str, ActionFactory] = {
    "Http.request": _http_action,
    "Faker.generate": _faker_action,
    "Database.query": _database_action,
}
for _method in ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"):
    ACTIONS[f"Http.{_method.lower()}"] = http_method_action(_method)


def resolve(name: Any) -> Optional[ActionFactory]:
    if not isinstance(name, str):
        return None
    return ACTIONS.get(name)


def build_action(
    name: str,
    parameters: Optional[Dict[str, Any]] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> BaseAction:
    """
    Instantiate the action registered under ``name``.

    Raises:
        ConfigurationError: unknown action name or database dialect
    """
    factory = resolve(name)
    if factory is None:
        raise ConfigurationError(f"Unknown action {name!r}. Known actions: {sorted(ACTIONS)}")
    return factory(parameters or {}, client=client)
