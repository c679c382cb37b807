"""Fan-out CLI application -- Typer-based operator interface.

Reads a SQL script from *stdin*, validates it, runs it against every target
listed in a JSON configuration file, and writes the combined rows to the
output file.  Human-readable output goes to *stderr* via Rich.

Exit codes: 0 on completion (even when some targets failed), 1 when the
script is invalid, 3 on configuration or other fatal errors, 130 when
interrupted.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import typer
from rich.console import Console

from fanout_cli.display import display_run_summary, display_validation_errors
from fanout_engine.config import Settings, TargetSwitch, load_run_config, load_settings
from fanout_engine.errors import ConfigError, ScriptValidationError
from fanout_engine.output.csv_format import CsvQuoting
from fanout_engine.sql_toolkit import Dialect
from fanout_engine.telemetry import configure_logging

EXIT_INVALID_SCRIPT = 1
EXIT_ERROR = 3
EXIT_INTERRUPTED = 130

# ---------------------------------------------------------------------------
# App & global state
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="fanout",
    help="Run one SQL script against many databases and combine the results.",
    no_args_is_help=True,
)
console = Console(stderr=True)

# Mutable global options populated by the Typer callback.
_log_level: str | None = None
_json_logs: bool = False


# ---------------------------------------------------------------------------
# Callback -- global options
# ---------------------------------------------------------------------------


@app.callback()
def _global_options(
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Emit log records as JSON lines on stderr.",
    ),
) -> None:
    """Global options applied to every command."""
    global _log_level, _json_logs  # noqa: PLW0603
    _log_level = log_level
    _json_logs = json_logs


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_settings(**overrides: object) -> Settings:
    """Environment settings with CLI flags layered on top, then set up logging."""
    if _log_level is not None:
        overrides["log_level"] = _log_level
    if _json_logs:
        overrides["structured_logging"] = True
    try:
        settings = load_settings(**{k: v for k, v in overrides.items() if v is not None})
    except ValueError as exc:
        console.print(f"[red]Invalid settings: {exc}[/red]")
        raise typer.Exit(code=EXIT_ERROR) from exc

    configure_logging(settings.log_level, structured=settings.structured_logging)
    return settings


def _read_stdin_script() -> str:
    from fanout_engine.script import read_script

    if sys.stdin.isatty():
        console.print("[dim]Reading SQL script from stdin (end with Ctrl-D)...[/dim]")
    return read_script(sys.stdin)


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@app.command()
def run(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to the JSON configuration file.",
        exists=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
    ),
    output: Path = typer.Option(
        ...,
        "--output",
        "-o",
        help="Output file for the combined results (overwritten).",
        dir_okay=False,
    ),
    parallelism: int | None = typer.Option(
        None,
        "--parallelism",
        "-p",
        min=1,
        help="Override the configured maximum number of concurrent targets.",
    ),
    dialect: Dialect | None = typer.Option(
        None,
        "--dialect",
        help="SQL dialect used to validate the script.",
        case_sensitive=False,
    ),
    quoting: CsvQuoting | None = typer.Option(
        None,
        "--quoting",
        help="Field quoting: legacy (commas only) or standard (RFC 4180).",
        case_sensitive=False,
    ),
    target_switch: TargetSwitch | None = typer.Option(
        None,
        "--target-switch",
        help="Select targets with USE statements or a {target} URL placeholder.",
        case_sensitive=False,
    ),
    summary: bool = typer.Option(
        True,
        "--summary/--no-summary",
        help="Print a per-target results table when the run completes.",
    ),
) -> None:
    """Execute the script read from stdin against every configured target."""
    from fanout_engine.runner import run_with_sqlalchemy

    settings = _load_settings(
        dialect=dialect,
        csv_quoting=quoting,
        target_switch=target_switch,
    )

    try:
        run_config = load_run_config(config, max_parallelism=parallelism)
    except ConfigError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=EXIT_ERROR) from exc

    script = _read_stdin_script()

    try:
        result = asyncio.run(run_with_sqlalchemy(script, run_config, output, settings))
    except ScriptValidationError as exc:
        display_validation_errors(console, exc.errors)
        raise typer.Exit(code=EXIT_INVALID_SCRIPT) from exc
    except KeyboardInterrupt as exc:
        console.print("[yellow]Run interrupted; output file is incomplete.[/yellow]")
        raise typer.Exit(code=EXIT_INTERRUPTED) from exc
    except Exception as exc:
        console.print(f"[red]Error running script: {exc}[/red]")
        raise typer.Exit(code=EXIT_ERROR) from exc

    if summary:
        display_run_summary(console, result)


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


@app.command()
def validate(
    dialect: Dialect | None = typer.Option(
        None,
        "--dialect",
        help="SQL dialect to validate against.",
        case_sensitive=False,
    ),
) -> None:
    """Grammar-check the script read from stdin without running it."""
    from fanout_engine.script import validate_script

    settings = _load_settings(dialect=dialect)
    script = _read_stdin_script()

    result = validate_script(script, settings.dialect)
    if not result.is_valid:
        display_validation_errors(console, result.errors)
        raise typer.Exit(code=EXIT_INVALID_SCRIPT)

    console.print(
        f"[green]Script is valid[/green] ({result.statement_count} statement(s), dialect {result.dialect.value})"
    )
