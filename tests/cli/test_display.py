"""Tests for fanout_cli/display.py -- Rich rendering of run results."""

from __future__ import annotations

from io import StringIO
from pathlib import Path

from rich.console import Console

from fanout_cli.display import display_run_summary, display_validation_errors
from fanout_engine.models.target import RunSummary, TargetOutcome, TargetStatus


def _console() -> tuple[Console, StringIO]:
    buf = StringIO()
    return Console(file=buf, width=160, force_terminal=False, color_system=None), buf


class TestDisplayValidationErrors:
    def test_lists_every_error(self):
        console, buf = _console()
        display_validation_errors(console, ["Line 1, Col 9: Expecting )", "Line 2, Col 4: Invalid expression"])
        text = buf.getvalue()
        assert "2 error(s)" in text
        assert "Expecting )" in text
        assert "Invalid expression" in text

    def test_no_errors(self):
        console, buf = _console()
        display_validation_errors(console, [])
        assert "no diagnostics" in buf.getvalue()


class TestDisplayRunSummary:
    def test_table_and_totals(self):
        summary = RunSummary(
            output_path=Path("out.csv"),
            header="TargetId,id",
            outcomes=[
                TargetOutcome(target="db2", status=TargetStatus.EMPTY),
                TargetOutcome(target="db1", status=TargetStatus.SUCCESS, fragment="db1,1\n", row_count=1),
                TargetOutcome(target="db3", status=TargetStatus.FAIL, error_message="OperationalError: no such table"),
            ],
            lines_written=1,
        )
        console, buf = _console()
        display_run_summary(console, summary)
        text = buf.getvalue()

        assert text.index("db1") < text.index("db2") < text.index("db3")
        assert "1 with rows" in text
        assert "1 empty" in text
        assert "1 failed" in text
        assert "no such table" in text
        assert "Header line is empty" not in text
        assert "1 data line(s) written" in text

    def test_empty_header_warning(self):
        summary = RunSummary(
            output_path=Path("out.csv"),
            outcomes=[TargetOutcome(target="db1", status=TargetStatus.EMPTY)],
        )
        console, buf = _console()
        display_run_summary(console, summary)
        assert "Header line is empty" in buf.getvalue()

    def test_no_outcomes(self):
        console, buf = _console()
        display_run_summary(console, RunSummary(output_path=Path("out.csv")))
        assert "No targets were executed" in buf.getvalue()
