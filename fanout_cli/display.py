"""Rich output formatting for the fan-out CLI.

All functions write to a :class:`rich.console.Console` instance bound to
*stderr*; the only artefact of a run is the output file.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from fanout_engine.models.target import RunSummary


# ---------------------------------------------------------------------------
# Status colour mapping
# ---------------------------------------------------------------------------

_STATUS_COLOURS: dict[str, str] = {
    "SUCCESS": "green",
    "EMPTY": "yellow",
    "FAIL": "red",
}


def _coloured_status(status: str) -> str:
    """Return a Rich markup string with the status colour-coded."""
    colour = _STATUS_COLOURS.get(status, "white")
    return f"[{colour}]{status}[/{colour}]"


# ---------------------------------------------------------------------------
# Validation diagnostics
# ---------------------------------------------------------------------------


def display_validation_errors(console: Console, errors: Sequence[str]) -> None:
    """Render grammar diagnostics in a red panel."""
    body = "\n".join(f"- {e}" for e in errors) if errors else "(no diagnostics reported)"
    console.print(
        Panel(
            body,
            title=f"Query is not valid ({len(errors)} error(s))",
            border_style="red",
        )
    )


# ---------------------------------------------------------------------------
# Run summary
# ---------------------------------------------------------------------------


def display_run_summary(console: Console, summary: RunSummary) -> None:
    """Render one row per target plus a totals line.

    Parameters
    ----------
    console:
        Rich console to write to (typically stderr).
    summary:
        The completed run.
    """
    if not summary.outcomes:
        console.print("[dim]No targets were executed.[/dim]")
        return

    table = Table(
        title="Fan-out Results",
        show_lines=False,
        pad_edge=True,
        expand=False,
    )
    table.add_column("Target", style="bold")
    table.add_column("Status")
    table.add_column("Rows", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("Error", overflow="fold")

    for outcome in sorted(summary.outcomes, key=lambda o: o.target):
        table.add_row(
            outcome.target,
            _coloured_status(outcome.status.value),
            str(outcome.row_count),
            f"{outcome.duration_seconds:.2f}s",
            outcome.error_message or "",
        )

    console.print(table)

    counts = {status: 0 for status in _STATUS_COLOURS}
    for outcome in summary.outcomes:
        counts[outcome.status.value] += 1

    parts: list[str] = [f"[bold]{len(summary.outcomes)}[/bold] target(s)"]
    if counts["SUCCESS"]:
        parts.append(f"[green]{counts['SUCCESS']} with rows[/green]")
    if counts["EMPTY"]:
        parts.append(f"[yellow]{counts['EMPTY']} empty[/yellow]")
    if counts["FAIL"]:
        parts.append(f"[red]{counts['FAIL']} failed[/red]")
    console.print(", ".join(parts))

    if not summary.header:
        console.print("[yellow]Header line is empty: the primary target returned no rows or failed.[/yellow]")
    console.print(f"{summary.lines_written} data line(s) written to [bold]{summary.output_path}[/bold]")
