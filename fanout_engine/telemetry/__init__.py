"""Logging setup for the fan-out engine and CLI."""

from __future__ import annotations

from fanout_engine.telemetry.log_config import JSONFormatter, configure_logging

__all__ = [
    "JSONFormatter",
    "configure_logging",
]
