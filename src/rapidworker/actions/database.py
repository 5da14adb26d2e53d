"""Database actions, one per SQL dialect, on SQLAlchemy's async engine."""
from __future__ import annotations

import time
from typing import Any, Dict, List, Mapping

import sqlalchemy as sa
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from rapidworker.context import Context
from rapidworker.model import ActionOutcome

from .base import BaseAction


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


class DatabaseAction(BaseAction):
    """
    Runs one SQL statement.

    Parameters:
      dialect     registry key (mysql, postgresql, mssql, sqlite)
      connection  SQLAlchemy URL string, or mapping of
                  host / port / username / password / database
      query       SQL text, executed with ``params`` bound if given
      variable    optional Context key receiving the result rows
    """

    name = "Database.query"
    dialect: str = ""
    driver: str = ""  # SQLAlchemy drivername, e.g. "postgresql+asyncpg"

    def url(self) -> URL:
        conn = self.parameters.get("connection")
        if isinstance(conn, str):
            url = make_url(conn)
            # pin our async driver, keep everything else
            return url.set(drivername=self.driver)
        if isinstance(conn, Mapping):
            port = conn.get("port")
            return URL.create(
                drivername=self.driver,
                username=conn.get("username") or conn.get("user"),
                password=conn.get("password"),
                host=conn.get("host"),
                port=int(port) if port not in (None, "") else None,
                database=conn.get("database"),
            )
        raise ValueError("Connection must be a URL string or a mapping")

    def create_engine(self) -> AsyncEngine:
        return create_async_engine(self.url())

    async def _evaluate(self, context: Context, started: float) -> ActionOutcome:
        query = self.parameters.get("query")
        if not query:
            return self.fail("Query must be provided, got none", started)
        if not self.parameters.get("connection"):
            return self.fail("Connection must be provided, got none", started)

        t0 = time.perf_counter()
        engine = self.create_engine()
        try:
            async with engine.begin() as conn:
                result = await conn.execute(sa.text(query), self.parameters.get("params") or {})
                rows: List[Dict[str, Any]] = []
                if result.returns_rows:
                    rows = [
                        {k: _jsonable(v) for k, v in row._mapping.items()}
                        for row in result
                    ]
                rowcount = result.rowcount
        except sa.exc.SQLAlchemyError as e:
            return self.fail(
                f"{self.dialect} query failed: {type(e).__name__}",
                t0,
                long_summary=str(e),
            )
        finally:
            await engine.dispose()

        variable = self.parameters.get("variable")
        if variable:
            context.set(variable, rows)

        return ActionOutcome(
            action_reports=[
                self.report(True, f"{self.dialect} query returned {len(rows)} row(s)", t0)
            ],
            response={"data": rows, "rowCount": rowcount},
        )


class MySqlDatabase(DatabaseAction):
    dialect = "mysql"
    driver = "mysql+aiomysql"


class PostgresqlDatabase(DatabaseAction):
    dialect = "postgresql"
    driver = "postgresql+asyncpg"


class MssqlDatabase(DatabaseAction):
    dialect = "mssql"
    driver = "mssql+aioodbc"


class SqliteDatabase(DatabaseAction):
    dialect = "sqlite"
    driver = "sqlite+aiosqlite"
