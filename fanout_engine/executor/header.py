"""Derive the output header from the primary target's own execution.

The primary target (index 0 of the target list) is executed exactly once, as
part of the fan-out; its column names are handed to the assembler through a
single-assignment future.  There is no separate schema-discovery execution,
so a side-effecting script fires once per target, never twice.
"""

from __future__ import annotations

import asyncio
import logging

from fanout_engine.models.target import TargetOutcome, TargetStatus
from fanout_engine.output.csv_format import CsvQuoting, format_header

logger = logging.getLogger(__name__)

PRIMARY_INDEX = 0


class HeaderResolver:
    """Single-assignment holder for the header line.

    Must be created inside a running event loop.
    """

    def __init__(
        self,
        primary_target: str,
        label: str = "TargetId",
        quoting: CsvQuoting = CsvQuoting.LEGACY,
    ) -> None:
        self._primary_target = primary_target
        self._label = label
        self._quoting = quoting
        self._future: asyncio.Future[str] = asyncio.get_running_loop().create_future()

    @property
    def resolved(self) -> bool:
        return self._future.done()

    def observe(self, index: int, outcome: TargetOutcome) -> None:
        """Outcome callback for the coordinator; only the primary's outcome counts."""
        if index != PRIMARY_INDEX or self._future.done():
            return

        if outcome.status == TargetStatus.SUCCESS:
            header = format_header(outcome.columns, self._label, self._quoting)
        elif outcome.status == TargetStatus.FAIL:
            logger.warning(
                "Cannot write headers: primary target %s failed (%s)",
                self._primary_target,
                outcome.error_message,
                extra={"target": self._primary_target},
            )
            header = ""
        else:
            logger.warning(
                "Primary target %s returned no rows; header will be empty",
                self._primary_target,
                extra={"target": self._primary_target},
            )
            header = ""

        self._future.set_result(header)

    def abandon(self) -> None:
        """Cancel the pending header so that waiters unwind.

        Called when the fan-out finishes without the primary ever reporting
        (it was cancelled).  No-op once the header is resolved.
        """
        if not self._future.done():
            self._future.cancel()

    async def header(self) -> str:
        """Wait for and return the header line ("" when unavailable)."""
        return await asyncio.shield(self._future)
