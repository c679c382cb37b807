"""Result models produced by a fan-out run."""

from __future__ import annotations

from fanout_engine.models.target import RunSummary, TargetOutcome, TargetStatus

__all__ = [
    "RunSummary",
    "TargetOutcome",
    "TargetStatus",
]
