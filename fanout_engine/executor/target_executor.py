"""Run the script against one target and serialise its rows.

Failure isolation is total: any ``Exception`` raised while connecting,
switching to the target, executing, or reading is logged with the target
identifier and converted into a ``FAIL`` outcome with an empty fragment.
Cancellation is not a failure -- ``asyncio.CancelledError`` propagates so the
coordinator can unwind.
"""

from __future__ import annotations

import asyncio
import logging
import time

from fanout_engine.executor.base import DatabaseBackend
from fanout_engine.models.target import TargetOutcome, TargetStatus
from fanout_engine.output.csv_format import CsvQuoting, format_row

logger = logging.getLogger(__name__)


class TargetExecutor:
    """Execute one shared, read-only script against individual targets.

    A single instance is shared by every concurrent task of a run; each
    :meth:`execute` call keeps its own connection and row buffer, so
    invocations never share mutable state.

    Parameters
    ----------
    backend:
        Database capability used to open per-target sessions.
    script:
        The validated script text.
    quoting:
        Field quoting applied to every row.
    """

    def __init__(
        self,
        backend: DatabaseBackend,
        script: str,
        quoting: CsvQuoting = CsvQuoting.LEGACY,
    ) -> None:
        self._backend = backend
        self._script = script
        self._quoting = quoting

    async def execute(self, target: str) -> TargetOutcome:
        """Run the script on *target* and return its outcome.

        Never raises for database errors; see the module docstring.
        """
        started = time.monotonic()
        lines: list[str] = []
        columns: tuple[str, ...] = ()

        logger.debug("Executing script on %s", target, extra={"target": target})

        try:
            async with self._backend.session(target) as session:
                result = await session.execute(self._script)
                columns = tuple(result.columns)
                async for row in result.rows():
                    lines.append(format_row(target, row, self._quoting))
        except asyncio.CancelledError:
            logger.warning("Execution cancelled for %s", target, extra={"target": target})
            raise
        except Exception as exc:
            error_msg = f"{type(exc).__name__}: {exc}"
            logger.error(
                "Could not execute query for %s: %s",
                target,
                error_msg,
                exc_info=True,
                extra={"target": target},
            )
            return TargetOutcome(
                target=target,
                status=TargetStatus.FAIL,
                columns=columns,
                error_message=error_msg,
                duration_seconds=time.monotonic() - started,
            )

        elapsed = time.monotonic() - started
        if not lines:
            logger.info("%s - no rows returned (%.2fs)", target, elapsed, extra={"target": target})
            return TargetOutcome(
                target=target,
                status=TargetStatus.EMPTY,
                columns=columns,
                duration_seconds=elapsed,
            )

        logger.info("%s - %d rows returned (%.2fs)", target, len(lines), elapsed, extra={"target": target})
        return TargetOutcome(
            target=target,
            status=TargetStatus.SUCCESS,
            fragment="".join(f"{line}\n" for line in lines),
            columns=columns,
            row_count=len(lines),
            duration_seconds=elapsed,
        )
