"""Contract tests for the SQL toolkit protocols.

These tests validate behavior that ANY implementation must satisfy.
They test against the protocol interface via ``get_sql_toolkit()``,
not against SQLGlot internals.
"""

from __future__ import annotations

import pytest

from fanout_engine.sql_toolkit import (
    Dialect,
    ParseDiagnostic,
    SqlValidator,
    ValidationResult,
    get_sql_toolkit,
    reset_toolkit,
)


@pytest.fixture(autouse=True)
def _reset_singleton():
    """Ensure each test gets a fresh toolkit (singleton safety)."""
    reset_toolkit()
    yield
    reset_toolkit()


@pytest.fixture()
def tk():
    """Return the default SQL toolkit."""
    return get_sql_toolkit()


# ===================================================================
# 1. Validation Contract
# ===================================================================


class TestValidationContract:
    """Validator protocol: validate()."""

    def test_validator_satisfies_protocol(self, tk):
        assert isinstance(tk.validator, SqlValidator)

    def test_simple_select_is_valid(self, tk):
        result = tk.validator.validate("SELECT id, name FROM t", Dialect.TSQL)
        assert isinstance(result, ValidationResult)
        assert result.is_valid is True
        assert result.errors == ()
        assert result.statement_count == 1

    def test_multi_statement_is_valid(self, tk):
        sql = "SELECT 1;\nSELECT name FROM dbo.customers WHERE id = 3;"
        result = tk.validator.validate(sql, Dialect.TSQL)
        assert result.is_valid
        assert result.statement_count == 2

    def test_tsql_bracket_identifiers(self, tk):
        result = tk.validator.validate("SELECT TOP 10 [id] FROM [dbo].[orders]", Dialect.TSQL)
        assert result.is_valid

    def test_unbalanced_parenthesis_is_invalid(self, tk):
        result = tk.validator.validate("SELECT (1 FROM t", Dialect.TSQL)
        assert result.is_valid is False
        assert len(result.errors) >= 1
        assert all(isinstance(d, ParseDiagnostic) for d in result.diagnostics)

    def test_dangling_where_is_invalid(self, tk):
        result = tk.validator.validate("SELECT * FROM t WHERE", Dialect.TSQL)
        assert not result.is_valid

    def test_errors_from_every_statement_are_collected(self, tk):
        sql = "SELECT (1 FROM a;\nSELECT (2 FROM b;"
        result = tk.validator.validate(sql, Dialect.TSQL)
        assert not result.is_valid
        assert len(result.errors) >= 2

    def test_diagnostics_carry_line_numbers(self, tk):
        sql = "SELECT 1;\nSELECT (2 FROM b"
        result = tk.validator.validate(sql, Dialect.TSQL)
        assert not result.is_valid
        assert any(d.line == 2 for d in result.diagnostics)
        assert any(e.startswith("Line 2") for e in result.errors)

    def test_empty_script_is_invalid(self, tk):
        result = tk.validator.validate("", Dialect.TSQL)
        assert not result.is_valid
        assert result.errors == ("Script is empty",)

    def test_whitespace_script_is_invalid(self, tk):
        result = tk.validator.validate("  \n\t ", Dialect.TSQL)
        assert not result.is_valid

    def test_unterminated_string_is_invalid(self, tk):
        result = tk.validator.validate("SELECT 'abc FROM t", Dialect.TSQL)
        assert not result.is_valid
        assert result.errors

    def test_result_records_dialect(self, tk):
        result = tk.validator.validate("SELECT 1", Dialect.POSTGRES)
        assert result.dialect == Dialect.POSTGRES

    def test_validation_is_deterministic(self, tk):
        sql = "SELECT (1 FROM t"
        first = tk.validator.validate(sql, Dialect.TSQL)
        second = tk.validator.validate(sql, Dialect.TSQL)
        assert first == second


# ===================================================================
# 2. Rewriting Contract
# ===================================================================


class TestRewritingContract:
    """Rewriter protocol: quote_identifier()."""

    def test_quote_identifier_tsql(self, tk):
        quoted = tk.rewriter.quote_identifier("sales eu", Dialect.TSQL)
        assert "sales eu" in quoted
        assert quoted != "sales eu"

    def test_quote_identifier_mysql(self, tk):
        quoted = tk.rewriter.quote_identifier("shard_01", Dialect.MYSQL)
        assert quoted == "`shard_01`"

    def test_quote_identifier_postgres(self, tk):
        quoted = tk.rewriter.quote_identifier("shard_01", Dialect.POSTGRES)
        assert quoted == '"shard_01"'


# ===================================================================
# 3. Diagnostic rendering
# ===================================================================


class TestParseDiagnostic:
    def test_str_with_location(self):
        d = ParseDiagnostic(description="Expecting )", line=3, column=14)
        assert str(d) == "Line 3, Col 14: Expecting )"

    def test_str_without_location(self):
        d = ParseDiagnostic(description="Script is empty")
        assert str(d) == "Script is empty"
