"""Row and header serialisation for the combined output file.

Two quoting modes are supported:

``legacy``
    A string value containing a comma is wrapped in double quotes.  Nothing
    else is escaped: embedded quotes and newlines pass through untouched.
    Header names are written verbatim.
``standard``
    Every field (target identifier and header names included) goes through
    :mod:`csv` with ``QUOTE_MINIMAL``, so commas, quotes, and newlines are
    quoted and embedded quotes are doubled.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any


class CsvQuoting(str, Enum):
    LEGACY = "legacy"
    STANDARD = "standard"


def render_value(value: Any) -> str:
    """Default textual form of a column value; ``None`` becomes an empty field."""
    if value is None:
        return ""
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value).hex()
    return str(value)


def _legacy_field(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"' if "," in value else value
    return render_value(value)


def _standard_line(fields: Iterable[str]) -> str:
    buf = io.StringIO()
    # csv only quotes CR and LF when they occur in the line terminator.
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    writer.writerow(list(fields))
    return buf.getvalue().removesuffix("\r\n")


def format_row(
    target: str,
    values: Sequence[Any],
    quoting: CsvQuoting = CsvQuoting.LEGACY,
) -> str:
    """Render one result row as ``target,v1,v2,...`` (no line terminator)."""
    if quoting == CsvQuoting.STANDARD:
        return _standard_line([target, *(render_value(v) for v in values)])
    return ",".join([target, *(_legacy_field(v) for v in values)])


def format_header(
    columns: Sequence[str],
    label: str = "TargetId",
    quoting: CsvQuoting = CsvQuoting.LEGACY,
) -> str:
    """Render the header line: *label* followed by the column names."""
    if quoting == CsvQuoting.STANDARD:
        return _standard_line([label, *columns])
    return ",".join([label, *columns])
