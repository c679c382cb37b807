"""SQLAlchemy asyncio backend.

Connects through ``create_async_engine`` so that any async driver SQLAlchemy
supports can serve as a target server:

* ``mssql+aioodbc://...``  -- SQL Server; targets are databases selected with
  ``USE [name]``.
* ``postgresql+asyncpg://host/{target}`` -- one database per target, selected
  through the URL.
* ``sqlite+aiosqlite:///data/{target}.db`` -- one file per target (local
  development and tests).

Engines run with ``AUTOCOMMIT`` so a script's own statements take effect the
way they would in an interactive session.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from fanout_engine.config import TargetSwitch
from fanout_engine.errors import ConfigError
from fanout_engine.sql_toolkit import Dialect, get_sql_toolkit

logger = logging.getLogger(__name__)

TARGET_PLACEHOLDER = "{target}"


class SqlAlchemyResultSet:
    """First result set of a script, fully fetched from the cursor."""

    def __init__(self, columns: tuple[str, ...], rows: Sequence[Sequence[Any]]) -> None:
        self._columns = columns
        self._rows = rows

    @property
    def columns(self) -> tuple[str, ...]:
        return self._columns

    async def rows(self) -> AsyncIterator[Sequence[Any]]:
        for row in self._rows:
            yield tuple(row)


# Drivers whose async cursors expose ``nextset()``.  On these a script's
# leading row-count-only results are skipped to reach its first rows.
_MULTI_RESULT_DRIVERS = frozenset({"aioodbc"})


async def read_first_result_set(cursor: Any, script: str) -> tuple[tuple[str, ...], list[Any]]:
    """Execute *script* on a raw async DBAPI cursor and fetch its first rows.

    Results that carry only a row count (``INSERT ...; SELECT ...`` without
    ``SET NOCOUNT ON``) are skipped.  Returns empty columns when no result
    of the script returns rows.
    """
    await cursor.execute(script)
    while cursor.description is None:
        if not await cursor.nextset():
            return (), []
    columns = tuple(str(d[0]) for d in cursor.description)
    return columns, list(await cursor.fetchall())


class SqlAlchemyTargetSession:
    """A live :class:`AsyncConnection` already switched to its target."""

    def __init__(self, connection: AsyncConnection) -> None:
        self._connection = connection

    async def execute(self, script: str) -> SqlAlchemyResultSet:
        if self._connection.dialect.driver in _MULTI_RESULT_DRIVERS:
            return await self._execute_on_driver_cursor(script)

        # Passed to the driver untouched: no bind-parameter parsing.
        result = await self._connection.exec_driver_sql(
            script,
            execution_options={"no_parameters": True},
        )
        if not result.returns_rows:
            return SqlAlchemyResultSet((), ())
        columns = tuple(str(k) for k in result.keys())
        return SqlAlchemyResultSet(columns, result.fetchall())

    async def _execute_on_driver_cursor(self, script: str) -> SqlAlchemyResultSet:
        raw = await self._connection.get_raw_connection()
        cursor = await raw.driver_connection.cursor()
        try:
            columns, rows = await read_first_result_set(cursor, script)
        finally:
            await cursor.close()
        return SqlAlchemyResultSet(columns, rows)


class SqlAlchemyBackend:
    """:class:`~fanout_engine.executor.base.DatabaseBackend` over SQLAlchemy asyncio.

    Parameters
    ----------
    connection_string:
        SQLAlchemy URL.  In ``URL`` mode it must contain ``{target}``.
    dialect:
        SQL dialect, used to quote the target name in ``USE`` statements.
    target_switch:
        How sessions are pointed at their target (see :class:`TargetSwitch`).
    pool_size:
        Connections kept by the shared ``USE``-mode engine; the run's
        concurrency bound, so no target waits on pool checkout.
    engine_options:
        Extra keyword arguments for ``create_async_engine``.
    """

    def __init__(
        self,
        connection_string: str,
        *,
        dialect: Dialect = Dialect.TSQL,
        target_switch: TargetSwitch = TargetSwitch.AUTO,
        pool_size: int | None = None,
        engine_options: dict[str, Any] | None = None,
    ) -> None:
        has_placeholder = TARGET_PLACEHOLDER in connection_string
        if target_switch == TargetSwitch.AUTO:
            target_switch = TargetSwitch.URL if has_placeholder else TargetSwitch.USE
        if target_switch == TargetSwitch.URL and not has_placeholder:
            raise ConfigError(
                f"Connection string must contain {TARGET_PLACEHOLDER} when targets are selected by URL"
            )

        self._connection_string = connection_string
        self._dialect = dialect
        self._target_switch = target_switch
        self._pool_size = pool_size
        self._engine_options = engine_options or {}
        self._engines: dict[str, AsyncEngine] = {}

    @property
    def target_switch(self) -> TargetSwitch:
        return self._target_switch

    # -- Engine management ---------------------------------------------------

    def _engine_for(self, target: str) -> AsyncEngine:
        """Return (and lazily create) the engine serving *target*.

        ``USE`` mode shares one engine (and its pool) across all targets;
        ``URL`` mode keeps one engine per target.
        """
        key = target if self._target_switch == TargetSwitch.URL else ""
        engine = self._engines.get(key)
        if engine is None:
            url = self._connection_string
            if self._target_switch == TargetSwitch.URL:
                url = url.replace(TARGET_PLACEHOLDER, target)
            options: dict[str, Any] = {"isolation_level": "AUTOCOMMIT", "echo": False}
            if not key and self._pool_size is not None:
                options["pool_size"] = self._pool_size
            options.update(self._engine_options)
            engine = create_async_engine(url, **options)
            self._engines[key] = engine
            logger.debug("Created async engine for %s", target if key else "all targets")
        return engine

    def use_statement(self, target: str) -> str:
        """``USE`` statement selecting *target*, quoted for the dialect."""
        quoted = get_sql_toolkit().rewriter.quote_identifier(target, self._dialect)
        return f"USE {quoted}"

    # -- DatabaseBackend implementation ----------------------------------------

    @asynccontextmanager
    async def session(self, target: str) -> AsyncIterator[SqlAlchemyTargetSession]:
        """Check out one connection for *target*; it is returned on every exit path."""
        engine = self._engine_for(target)
        async with engine.connect() as conn:
            if self._target_switch == TargetSwitch.USE:
                await conn.exec_driver_sql(self.use_statement(target))
            yield SqlAlchemyTargetSession(conn)

    async def dispose(self) -> None:
        """Dispose every engine created during the run."""
        engines = list(self._engines.values())
        self._engines.clear()
        for engine in engines:
            await engine.dispose()

    # -- Context manager support -----------------------------------------------

    async def __aenter__(self) -> SqlAlchemyBackend:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.dispose()
