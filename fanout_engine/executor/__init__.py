"""Per-target execution, header resolution, and fan-out coordination."""

from __future__ import annotations

from fanout_engine.executor.base import DatabaseBackend, ResultSet, TargetSession
from fanout_engine.executor.coordinator import FanOutCoordinator
from fanout_engine.executor.header import HeaderResolver
from fanout_engine.executor.sqlalchemy_backend import SqlAlchemyBackend
from fanout_engine.executor.target_executor import TargetExecutor

__all__ = [
    "DatabaseBackend",
    "FanOutCoordinator",
    "HeaderResolver",
    "ResultSet",
    "SqlAlchemyBackend",
    "TargetExecutor",
    "TargetSession",
]
