"""Unit tests for fanout_engine.executor.target_executor."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

import pytest

from fanout_engine.executor.target_executor import TargetExecutor
from fanout_engine.models.target import TargetStatus
from fanout_engine.output.csv_format import CsvQuoting

SCRIPT = "SELECT id, name FROM t"


class TestExecuteSuccess:
    @pytest.mark.asyncio
    async def test_rows_prefixed_with_target(self, fake_backend_cls):
        backend = fake_backend_cls({"db1": (("id", "name"), [(1, "a"), (2, "b,c")])})
        outcome = await TargetExecutor(backend, SCRIPT).execute("db1")

        assert outcome.status == TargetStatus.SUCCESS
        assert outcome.fragment == 'db1,1,a\ndb1,2,"b,c"\n'
        assert outcome.row_count == 2
        assert outcome.columns == ("id", "name")
        assert outcome.error_message is None

    @pytest.mark.asyncio
    async def test_row_order_follows_result(self, fake_backend_cls):
        rows = [(i, f"n{i}") for i in range(10)]
        backend = fake_backend_cls({"db1": (("id", "name"), rows)})
        outcome = await TargetExecutor(backend, SCRIPT).execute("db1")
        assert outcome.fragment.splitlines() == [f"db1,{i},n{i}" for i in range(10)]

    @pytest.mark.asyncio
    async def test_standard_quoting(self, fake_backend_cls):
        backend = fake_backend_cls({"db1": (("note",), [('say "hi"',)])})
        outcome = await TargetExecutor(backend, SCRIPT, CsvQuoting.STANDARD).execute("db1")
        assert outcome.fragment == 'db1,"say ""hi"""\n'

    @pytest.mark.asyncio
    async def test_script_passed_through(self, fake_backend_cls):
        backend = fake_backend_cls({"db1": (("id",), [(1,)])})
        await TargetExecutor(backend, SCRIPT).execute("db1")
        assert backend.executed == [("db1", SCRIPT)]

    @pytest.mark.asyncio
    async def test_connection_released(self, fake_backend_cls):
        backend = fake_backend_cls({"db1": (("id",), [(1,)])})
        await TargetExecutor(backend, SCRIPT).execute("db1")
        assert backend.opened == ["db1"]
        assert backend.released == ["db1"]


class TestExecuteEmpty:
    @pytest.mark.asyncio
    async def test_no_rows_is_empty_fragment(self, fake_backend_cls):
        backend = fake_backend_cls({"db2": (("id", "name"), [])})
        outcome = await TargetExecutor(backend, SCRIPT).execute("db2")
        assert outcome.status == TargetStatus.EMPTY
        assert outcome.fragment == ""
        assert outcome.row_count == 0
        assert outcome.columns == ("id", "name")

    @pytest.mark.asyncio
    async def test_statement_without_result_set(self, fake_backend_cls):
        backend = fake_backend_cls({})
        outcome = await TargetExecutor(backend, "UPDATE t SET x = 1").execute("db1")
        assert outcome.status == TargetStatus.EMPTY
        assert outcome.columns == ()


class TestExecuteFailure:
    @pytest.mark.asyncio
    async def test_connect_failure_is_isolated(self, fake_backend_cls):
        backend = fake_backend_cls({}, connect_errors={"db3"})
        outcome = await TargetExecutor(backend, SCRIPT).execute("db3")
        assert outcome.status == TargetStatus.FAIL
        assert outcome.fragment == ""
        assert "ConnectionError" in (outcome.error_message or "")

    @pytest.mark.asyncio
    async def test_execute_failure_is_isolated(self, fake_backend_cls):
        backend = fake_backend_cls({"db1": (("id",), [(1,)])}, execute_errors={"db1"})
        outcome = await TargetExecutor(backend, SCRIPT).execute("db1")
        assert outcome.status == TargetStatus.FAIL
        assert outcome.fragment == ""
        assert backend.released == ["db1"]

    @pytest.mark.asyncio
    async def test_failure_mid_read_discards_partial_rows(self, fake_backend_cls):
        class ExplodingRows:
            columns = ("id",)

            async def rows(self):
                yield (1,)
                raise OSError("connection reset by peer")

        backend = fake_backend_cls({})

        class Session:
            async def execute(self, script):
                return ExplodingRows()

        @asynccontextmanager
        async def session(target):
            yield Session()

        backend.session = session  # type: ignore[method-assign]
        outcome = await TargetExecutor(backend, SCRIPT).execute("db1")
        assert outcome.status == TargetStatus.FAIL
        assert outcome.fragment == ""
        assert outcome.row_count == 0

    @pytest.mark.asyncio
    async def test_failure_logged_with_target(self, fake_backend_cls, caplog):
        backend = fake_backend_cls({}, connect_errors={"db3"})
        with caplog.at_level(logging.ERROR, logger="fanout_engine.executor.target_executor"):
            await TargetExecutor(backend, SCRIPT).execute("db3")

        records = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert records
        assert "db3" in records[0].getMessage()
        assert getattr(records[0], "target", None) == "db3"
        assert records[0].exc_info is not None


class TestExecuteCancellation:
    @pytest.mark.asyncio
    async def test_cancellation_propagates_and_releases(self, fake_backend_cls):
        gate = asyncio.Event()
        backend = fake_backend_cls({"db1": (("id",), [(1,)])}, gate=gate)
        task = asyncio.create_task(TargetExecutor(backend, SCRIPT).execute("db1"))

        while not backend.executed:
            await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert backend.released == ["db1"]
        assert backend.in_flight == 0
