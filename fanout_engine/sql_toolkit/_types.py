"""SQL toolkit shared types.

Every type here is implementation-agnostic. Consumer code operates on these
types exclusively. The backing implementation (SQLGlot or otherwise)
converts to/from its native types internally.

ZERO dependency on any SQL parsing library.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Dialect
# ---------------------------------------------------------------------------


class Dialect(str, enum.Enum):
    """Supported SQL dialects.

    Values double as the dialect names understood by the grammar backend.
    """

    TSQL = "tsql"
    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLITE = "sqlite"
    ORACLE = "oracle"
    DUCKDB = "duckdb"
    SNOWFLAKE = "snowflake"
    DATABRICKS = "databricks"


# ---------------------------------------------------------------------------
# Result Containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ParseDiagnostic:
    """A single grammar error reported by the parser.

    ``line`` and ``column`` are 1-based and ``0`` when the backend could not
    locate the error.
    """

    description: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.line:
            return f"Line {self.line}, Col {self.column}: {self.description}"
        return self.description


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of a grammar-only check of a SQL script.

    ``errors`` is empty exactly when ``is_valid`` is ``True``.
    """

    is_valid: bool
    dialect: Dialect
    diagnostics: tuple[ParseDiagnostic, ...] = ()
    statement_count: int = 0

    @property
    def errors(self) -> tuple[str, ...]:
        """Diagnostics rendered as human-readable messages, in parser order."""
        return tuple(str(d) for d in self.diagnostics)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class SqlToolkitError(Exception):
    """Base exception for all sql_toolkit errors."""


class SqlParseError(SqlToolkitError):
    """SQL could not be parsed."""
