"""Exception hierarchy for the fan-out engine.

Only run-fatal conditions are modelled as exceptions.  Failures of an
individual target are never raised past the executor; they are captured on
the :class:`~fanout_engine.models.target.TargetOutcome` instead.
"""

from __future__ import annotations


class FanoutError(Exception):
    """Base exception for all fan-out engine errors."""


class ConfigError(FanoutError):
    """The run configuration file is missing, unreadable, or malformed."""


class ScriptValidationError(FanoutError):
    """The input script failed the grammar check; no target was contacted."""

    def __init__(self, errors: tuple[str, ...] | list[str]) -> None:
        self.errors: tuple[str, ...] = tuple(errors)
        detail = "; ".join(self.errors) if self.errors else "unknown parse error"
        super().__init__(f"Script is not valid: {detail}")
