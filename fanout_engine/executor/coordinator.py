"""Bounded-concurrency fan-out across targets.

One asyncio task is spawned per target inside a :class:`asyncio.TaskGroup`;
an :class:`asyncio.Semaphore` sized to the concurrency bound gates the actual
execution, so at most ``max_parallelism`` targets are in flight at any time
and the rest start as earlier ones finish.

Outcomes land in a plain list in completion order.  Every producer runs on
the same event loop, so ``list.append`` needs no further locking, and no
ordering between targets is implied.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from fanout_engine.executor.target_executor import TargetExecutor
from fanout_engine.models.target import TargetOutcome

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[int, TargetOutcome], None]


class FanOutCoordinator:
    """Drive a :class:`TargetExecutor` across every target.

    Parameters
    ----------
    executor:
        Shared executor; called once per target.
    max_parallelism:
        Concurrency bound, at least 1.
    """

    def __init__(self, executor: TargetExecutor, max_parallelism: int = 5) -> None:
        if max_parallelism < 1:
            raise ValueError(f"max_parallelism must be >= 1, got {max_parallelism}")
        self._executor = executor
        self._max_parallelism = max_parallelism

    @property
    def max_parallelism(self) -> int:
        return self._max_parallelism

    async def run(
        self,
        targets: Sequence[str],
        on_outcome: OutcomeCallback | None = None,
    ) -> list[TargetOutcome]:
        """Execute every target once and return the outcomes in completion order.

        *on_outcome* is called with the target's position in *targets* and
        its outcome as soon as that target finishes.

        Cancelling the caller cancels in-flight executions at their next
        await; targets still waiting for a slot never start.  Returns only
        after every task has finished or been cancelled.  No retries.
        """
        semaphore = asyncio.Semaphore(self._max_parallelism)
        outcomes: list[TargetOutcome] = []

        async def _run_one(index: int, target: str) -> None:
            async with semaphore:
                outcome = await self._executor.execute(target)
            outcomes.append(outcome)
            if on_outcome is not None:
                on_outcome(index, outcome)

        logger.info(
            "Fanning out to %d target(s) with max_parallelism=%d",
            len(targets),
            self._max_parallelism,
        )
        try:
            async with asyncio.TaskGroup() as tg:
                for index, target in enumerate(targets):
                    tg.create_task(_run_one(index, target), name=f"fanout:{target}")
        except asyncio.CancelledError:
            logger.warning(
                "Fan-out cancelled after %d of %d target(s) completed",
                len(outcomes),
                len(targets),
            )
            raise

        logger.info("Fan-out complete: %d target(s) finished", len(outcomes))
        return outcomes
