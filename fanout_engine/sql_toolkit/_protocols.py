"""SQL toolkit protocol definitions.

These define the interface contract that ANY implementation must satisfy.
Consumer code depends on these protocols, never on concrete implementations.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ._types import Dialect, ValidationResult

# ---------------------------------------------------------------------------
# Individual Capability Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class SqlValidator(Protocol):
    """Grammar-check SQL scripts without executing them."""

    def validate(
        self,
        sql: str,
        dialect: Dialect = Dialect.TSQL,
    ) -> ValidationResult:
        """Parse *sql* against the grammar of *dialect*.

        Must be pure: no I/O, no logging of its own.  Every diagnostic the
        parser produces is returned, not just the first one.

        Args:
            sql: The raw script text, possibly containing several statements.
            dialect: Grammar to check against.

        Returns:
            ``ValidationResult`` whose ``is_valid`` is ``False`` when at least
            one diagnostic was reported.
        """
        ...


@runtime_checkable
class SqlRewriter(Protocol):
    """Produce dialect-correct SQL fragments."""

    def quote_identifier(
        self,
        name: str,
        dialect: Dialect = Dialect.TSQL,
    ) -> str:
        """Safely quote an identifier for the given dialect."""
        ...


# ---------------------------------------------------------------------------
# Composite Toolkit Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class SqlToolkit(Protocol):
    """Composite entry point bundling every SQL capability."""

    @property
    def validator(self) -> SqlValidator: ...

    @property
    def rewriter(self) -> SqlRewriter: ...
