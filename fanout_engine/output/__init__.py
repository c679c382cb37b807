"""Serialisation and assembly of the combined output file."""

from __future__ import annotations

from fanout_engine.output.assembler import OutputAssembler
from fanout_engine.output.csv_format import CsvQuoting, format_header, format_row, render_value

__all__ = [
    "CsvQuoting",
    "OutputAssembler",
    "format_header",
    "format_row",
    "render_value",
]
