"""Capture and grammar-check the input script."""

from __future__ import annotations

from typing import TextIO

from fanout_engine.sql_toolkit import Dialect, ValidationResult, get_sql_toolkit


def read_script(stream: TextIO) -> str:
    """Read *stream* to end-of-input and return the script text.

    Blocks until EOF.  A leading byte-order mark is dropped.
    """
    text = stream.read()
    return text.removeprefix("\ufeff")


def validate_script(script: str, dialect: Dialect = Dialect.TSQL) -> ValidationResult:
    """Check *script* against the grammar of *dialect* without executing it."""
    return get_sql_toolkit().validator.validate(script, dialect)
