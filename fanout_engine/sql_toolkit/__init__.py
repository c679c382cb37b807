"""SQL Toolkit: implementation-agnostic grammar checks and identifier quoting.

Usage::

    from fanout_engine.sql_toolkit import get_sql_toolkit, Dialect

    tk = get_sql_toolkit()
    result = tk.validator.validate("SELECT id FROM t", Dialect.TSQL)
    quoted = tk.rewriter.quote_identifier("sales_eu", Dialect.TSQL)

The default implementation delegates to SQLGlot.  A different backend can be
swapped in via ``register_implementation()`` without touching consumer code.
"""

from ._factory import get_sql_toolkit, register_implementation, reset_toolkit
from ._protocols import SqlRewriter, SqlToolkit, SqlValidator
from ._types import (
    Dialect,
    ParseDiagnostic,
    SqlParseError,
    SqlToolkitError,
    ValidationResult,
)

__all__ = [
    # Factory
    "get_sql_toolkit",
    "register_implementation",
    "reset_toolkit",
    # Protocols
    "SqlToolkit",
    "SqlValidator",
    "SqlRewriter",
    # Types
    "Dialect",
    "ParseDiagnostic",
    "ValidationResult",
    # Exceptions
    "SqlToolkitError",
    "SqlParseError",
]
