"""Top-level control flow for one fan-out run.

validate → fan out (header resolved from the primary target as soon as it
finishes) → write header → wait for every target → append fragments.

Nothing is written and no target is contacted when validation fails.  Once
validation passes, the run always produces the output file; individual
target failures only show up in the logs and in the returned summary.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from fanout_engine.config import RunConfig, Settings, load_settings
from fanout_engine.errors import ScriptValidationError
from fanout_engine.executor.base import DatabaseBackend
from fanout_engine.executor.coordinator import FanOutCoordinator
from fanout_engine.executor.header import HeaderResolver
from fanout_engine.executor.sqlalchemy_backend import SqlAlchemyBackend
from fanout_engine.executor.target_executor import TargetExecutor
from fanout_engine.models.target import RunSummary, TargetStatus
from fanout_engine.output.assembler import OutputAssembler
from fanout_engine.script import validate_script

logger = logging.getLogger(__name__)


async def _cancel_and_wait(task: asyncio.Task[object]) -> None:
    """Cancel *task* and wait until it has unwound (connections released)."""
    if not task.done():
        task.cancel()
    await asyncio.gather(task, return_exceptions=True)


async def run_fanout(
    script: str,
    config: RunConfig,
    output_path: Path,
    *,
    backend: DatabaseBackend,
    settings: Settings | None = None,
) -> RunSummary:
    """Execute *script* on every configured target and write the combined file.

    Parameters
    ----------
    script:
        Raw script text, read once by the caller.
    config:
        Targets, concurrency bound, and connection bundle.
    output_path:
        Destination file; overwritten.
    backend:
        Database capability used for every target session.
    settings:
        Dialect, header label, and quoting.  Loaded from the environment
        when omitted.

    Raises
    ------
    ScriptValidationError
        If the script fails the grammar check.  Nothing has been executed or
        written at that point.
    """
    settings = settings or load_settings()

    validation = validate_script(script, settings.dialect)
    if not validation.is_valid:
        logger.error("Query is not valid: %s", "; ".join(validation.errors))
        raise ScriptValidationError(validation.errors)

    executor = TargetExecutor(backend, script, settings.csv_quoting)
    coordinator = FanOutCoordinator(executor, config.max_parallelism)
    resolver = HeaderResolver(config.primary_target, settings.target_id_column, settings.csv_quoting)
    assembler = OutputAssembler(output_path)

    fanout = asyncio.create_task(
        coordinator.run(config.targets, on_outcome=resolver.observe),
        name="fanout",
    )
    # If the fan-out ends without the primary reporting, stop waiting on the header.
    fanout.add_done_callback(lambda _task: resolver.abandon())

    # Any way out of this block other than completion stops the fan-out first.
    try:
        header = await resolver.header()
        assembler.write_header(header)
        outcomes = await fanout
    except asyncio.CancelledError:
        await _cancel_and_wait(fanout)
        if not fanout.cancelled() and fanout.exception() is not None:
            raise fanout.exception() from None  # type: ignore[misc]
        raise
    except BaseException:
        await _cancel_and_wait(fanout)
        raise

    lines = assembler.append_fragments(o.fragment for o in outcomes)
    summary = RunSummary(
        output_path=output_path,
        header=header,
        outcomes=outcomes,
        lines_written=lines,
    )
    logger.info(
        "Run complete: %d succeeded, %d empty, %d failed; %d line(s) written to %s",
        summary.count(TargetStatus.SUCCESS),
        summary.count(TargetStatus.EMPTY),
        summary.count(TargetStatus.FAIL),
        lines,
        output_path,
    )
    return summary


async def run_with_sqlalchemy(
    script: str,
    config: RunConfig,
    output_path: Path,
    settings: Settings | None = None,
) -> RunSummary:
    """:func:`run_fanout` over a :class:`SqlAlchemyBackend` built from *config*.

    The backend's engines are disposed when the run ends, however it ends.
    """
    settings = settings or load_settings()
    backend = SqlAlchemyBackend(
        config.connection_string.get_secret_value(),
        dialect=settings.dialect,
        target_switch=settings.target_switch,
        pool_size=config.max_parallelism,
    )
    async with backend:
        return await run_fanout(
            script,
            config,
            output_path,
            backend=backend,
            settings=settings,
        )
