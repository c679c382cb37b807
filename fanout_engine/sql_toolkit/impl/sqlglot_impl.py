"""SQLGlot-backed implementation of the SQL toolkit protocols.

This is the ONLY file in the entire codebase that imports ``sqlglot`` directly.
All consumer code goes through the protocol interfaces defined in
:mod:`fanout_engine.sql_toolkit._protocols`.
"""

from __future__ import annotations

from typing import Any

from sqlglot import exp
from sqlglot.dialects.dialect import Dialect as SqlglotDialect
from sqlglot.errors import ErrorLevel, ParseError, SqlglotError, TokenError

from .._types import Dialect, ParseDiagnostic, SqlParseError, ValidationResult


_EMPTY_SCRIPT = "Script is empty"


def _dialect_value(dialect: Dialect) -> str:
    """Return the sqlglot dialect string for a :class:`Dialect` enum member."""
    return dialect.value


def _get_dialect(dialect: Dialect) -> SqlglotDialect:
    try:
        return SqlglotDialect.get_or_raise(_dialect_value(dialect))
    except ValueError as exc:
        raise SqlParseError(f"Unsupported dialect: {dialect.value}") from exc


def _diagnostics_from(error: SqlglotError) -> list[ParseDiagnostic]:
    """Flatten a sqlglot error into one diagnostic per reported problem.

    ``ParseError`` carries a list of structured error dicts; other sqlglot
    errors (tokenizer failures) only have a message.
    """
    details: list[dict[str, Any]] = getattr(error, "errors", None) or []
    if not details:
        return [ParseDiagnostic(description=str(error))]

    diagnostics: list[ParseDiagnostic] = []
    for detail in details:
        diagnostics.append(
            ParseDiagnostic(
                description=str(detail.get("description") or error),
                line=int(detail.get("line") or 0),
                column=int(detail.get("col") or 0),
            )
        )
    return diagnostics


# ---------------------------------------------------------------------------
# SqlGlotValidator
# ---------------------------------------------------------------------------


class SqlGlotValidator:
    """SQLGlot-backed :class:`SqlValidator` implementation.

    Runs the parser at ``ErrorLevel.WARN`` so that it keeps going after the
    first problem; every error accumulated on the parser (across all
    statements) becomes a diagnostic.
    """

    def validate(
        self,
        sql: str,
        dialect: Dialect = Dialect.TSQL,
    ) -> ValidationResult:
        """Grammar-check *sql* without executing it."""
        if not sql.strip():
            return ValidationResult(
                is_valid=False,
                dialect=dialect,
                diagnostics=(ParseDiagnostic(description=_EMPTY_SCRIPT),),
            )

        glot_dialect = _get_dialect(dialect)

        try:
            tokens = glot_dialect.tokenize(sql)
        except TokenError as exc:
            return ValidationResult(
                is_valid=False,
                dialect=dialect,
                diagnostics=tuple(_diagnostics_from(exc)),
            )

        parser = glot_dialect.parser(error_level=ErrorLevel.WARN)
        diagnostics: list[ParseDiagnostic] = []
        statements: list[Any] = []
        try:
            statements = parser.parse(tokens, sql)
        except SqlglotError as exc:
            diagnostics.extend(_diagnostics_from(exc))

        for error in parser.errors:
            diagnostics.extend(_diagnostics_from(error))

        statement_count = sum(1 for s in statements if s is not None)
        if not diagnostics and statement_count == 0:
            diagnostics.append(ParseDiagnostic(description=_EMPTY_SCRIPT))

        return ValidationResult(
            is_valid=not diagnostics,
            dialect=dialect,
            diagnostics=tuple(diagnostics),
            statement_count=statement_count,
        )


# ---------------------------------------------------------------------------
# SqlGlotRewriter
# ---------------------------------------------------------------------------


class SqlGlotRewriter:
    """SQLGlot-backed :class:`SqlRewriter` implementation."""

    def quote_identifier(
        self,
        name: str,
        dialect: Dialect = Dialect.TSQL,
    ) -> str:
        """Safely quote an identifier for the given dialect."""
        try:
            return exp.to_identifier(name, quoted=True).sql(
                dialect=_dialect_value(dialect)
            )
        except ParseError as exc:
            raise SqlParseError(f"Cannot quote identifier {name!r}: {exc}") from exc


# ---------------------------------------------------------------------------
# Composite toolkit
# ---------------------------------------------------------------------------


class SqlGlotToolkit:
    """Composite :class:`SqlToolkit` backed by SQLGlot.

    This is the default implementation returned by :func:`get_sql_toolkit`.
    """

    def __init__(self) -> None:
        self._validator = SqlGlotValidator()
        self._rewriter = SqlGlotRewriter()

    @property
    def validator(self) -> SqlGlotValidator:
        return self._validator

    @property
    def rewriter(self) -> SqlGlotRewriter:
        return self._rewriter
