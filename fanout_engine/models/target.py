"""Per-target outcome and whole-run summary models.

A ``TargetOutcome`` is the tagged result behind every fragment written to the
output file.  The file itself does not distinguish a target that returned no
rows from one that failed (both contribute an empty fragment); the status on
the outcome is what logging and the run summary use to tell them apart.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class TargetStatus(str, Enum):
    """Terminal state of a single target execution."""

    SUCCESS = "SUCCESS"
    EMPTY = "EMPTY"
    FAIL = "FAIL"


class TargetOutcome(BaseModel):
    """Result of executing the script against one target."""

    model_config = ConfigDict(frozen=True)

    target: str = Field(
        ...,
        description="Identifier of the target the script ran against.",
    )
    status: TargetStatus = Field(
        ...,
        description="SUCCESS when rows were returned, EMPTY for none, FAIL on error.",
    )
    fragment: str = Field(
        default="",
        description="Serialised rows, one newline-terminated line per row.",
    )
    columns: tuple[str, ...] = Field(
        default=(),
        description="Column names of the first result set, in result order.",
    )
    row_count: int = Field(
        default=0,
        ge=0,
        description="Number of data lines in the fragment.",
    )
    error_message: str | None = Field(
        default=None,
        description="Exception type and message when the execution failed.",
    )
    duration_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Wall-clock time spent on this target.",
    )

    @property
    def failed(self) -> bool:
        return self.status == TargetStatus.FAIL


class RunSummary(BaseModel):
    """Everything the caller needs to report on a completed run."""

    output_path: Path
    header: str = ""
    outcomes: list[TargetOutcome] = Field(default_factory=list)
    lines_written: int = 0

    def count(self, status: TargetStatus) -> int:
        """Number of targets that finished with *status*."""
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def failed_targets(self) -> list[str]:
        return [o.target for o in self.outcomes if o.failed]
