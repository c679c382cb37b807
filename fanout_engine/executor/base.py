"""Abstract interface for database backends.

The fan-out engine never talks to a driver directly.  Every backend -- the
SQLAlchemy one used in production or the in-memory fakes used in tests --
must satisfy the :class:`DatabaseBackend` protocol so that the executor and
coordinator stay driver-agnostic.

All operations are coroutines: every network wait is a suspension point at
which task cancellation is observed.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol


class ResultSet(Protocol):
    """The first tabular result produced by a script."""

    @property
    def columns(self) -> tuple[str, ...]:
        """Column names in result order.  Empty when the script returned no rows."""
        ...

    def rows(self) -> AsyncIterator[Sequence[Any]]:
        """Iterate the rows in the result's native order.

        Each row is a sequence of typed Python values, one per column.
        """
        ...


class TargetSession(Protocol):
    """A connection already pointed at one target."""

    async def execute(self, script: str) -> ResultSet:
        """Run *script* as a single text command and return its first result set."""
        ...


class DatabaseBackend(Protocol):
    """Structural interface for database backends.

    Implementations are **not** required to subclass this protocol; they only
    need to expose methods with matching signatures (duck typing).
    """

    def session(self, target: str) -> AbstractAsyncContextManager[TargetSession]:
        """Open a connection and select *target* as the active database.

        The returned context manager owns exactly one connection and must
        release it on every exit path, including cancellation.
        """
        ...

    async def dispose(self) -> None:
        """Release pooled resources once the run is over."""
        ...
