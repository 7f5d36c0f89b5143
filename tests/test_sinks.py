from __future__ import annotations

import asyncio
import time
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from cronaudit.models import AuditRecord, DatabaseManager, ExecutionStatus, audit_table
from cronaudit.sinks import (
    AuditSink,
    DocumentAuditSink,
    NoopAuditSink,
    SqlAlchemyAuditSink,
)


@pytest.fixture(name="db_manager")
def fixture_db_manager(tmp_path):
    DatabaseManager.reset_instance()
    manager = DatabaseManager.get_instance(str(tmp_path / "cronaudit.db"))
    yield manager
    DatabaseManager.reset_instance()


def _record(status=ExecutionStatus.Success, remarks=None, batch_size=7) -> AuditRecord:
    start = datetime(2024, 3, 1, 2, 0, tzinfo=timezone.utc)
    return AuditRecord(
        name="nightly-sync",
        start_time=start,
        end_time=start + timedelta(seconds=12),
        status=status,
        remarks=remarks,
        batch_size=batch_size,
    )


def test_record_row_and_document_shapes():
    record = _record(ExecutionStatus.Failure, remarks="db unreachable", batch_size=0)

    assert record.to_row() == (
        "nightly-sync",
        record.start_time,
        record.end_time,
        "Failure",
        "db unreachable",
        0,
    )
    assert record.to_dict() == {
        "cron_name": "nightly-sync",
        "start_date_time": record.start_time,
        "end_date_time": record.end_time,
        "execution_status": "Failure",
        "remarks": "db unreachable",
        "batch_size": 0,
    }


def test_sinks_satisfy_audit_sink_interface(db_manager):
    assert isinstance(NoopAuditSink(), AuditSink)
    assert isinstance(SqlAlchemyAuditSink(db_manager), AuditSink)
    assert isinstance(DocumentAuditSink(SyncCollection()), AuditSink)


def test_noop_sink_discards_records():
    asyncio.run(NoopAuditSink().log(_record()))


def test_sqlalchemy_sink_inserts_six_columns(db_manager):
    sink = SqlAlchemyAuditSink(db_manager)
    asyncio.run(sink.log(_record(ExecutionStatus.Failure, "db unreachable", 0)))

    table = audit_table()
    with db_manager.get_session() as session:
        rows = session.execute(select(table)).mappings().all()

    assert len(rows) == 1
    row = rows[0]
    assert row["cron_name"] == "nightly-sync"
    assert row["execution_status"] == "Failure"
    assert row["remarks"] == "db unreachable"
    assert row["batch_size"] == 0
    assert row["end_date_time"] - row["start_date_time"] == timedelta(seconds=12)


def test_sqlalchemy_sink_custom_table_name(db_manager):
    sink = SqlAlchemyAuditSink(db_manager, table_name="billing_cron_logs")
    asyncio.run(sink.log(_record()))
    asyncio.run(sink.log(_record()))

    with db_manager.get_session() as session:
        custom_rows = session.execute(
            select(audit_table("billing_cron_logs"))
        ).all()
        default_rows = session.execute(select(audit_table())).all()

    assert len(custom_rows) == 2
    assert default_rows == []


class BrokenDatabaseManager:
    def ensure_table(self, table_name):
        return audit_table(table_name)

    def get_session(self):
        raise RuntimeError("database is locked")


def test_sqlalchemy_sink_swallows_errors_by_default():
    sink = SqlAlchemyAuditSink(BrokenDatabaseManager())  # type: ignore[arg-type]
    asyncio.run(sink.log(_record()))


def test_sqlalchemy_sink_raises_when_configured():
    sink = SqlAlchemyAuditSink(
        BrokenDatabaseManager(), raise_errors=True  # type: ignore[arg-type]
    )
    with pytest.raises(RuntimeError, match="database is locked"):
        asyncio.run(sink.log(_record()))


class SyncCollection:
    def __init__(self):
        self.documents: list[dict] = []

    def insert_one(self, document: dict) -> None:
        self.documents.append(document)


class AsyncCollection(SyncCollection):
    async def insert_one(self, document: dict) -> None:  # type: ignore[override]
        await asyncio.sleep(0)
        self.documents.append(document)


class BrokenCollection:
    def insert_one(self, document: dict) -> None:
        raise ConnectionError("replica set unavailable")


@pytest.mark.parametrize("collection_cls", [SyncCollection, AsyncCollection])
def test_document_sink_inserts_structured_record(collection_cls):
    collection = collection_cls()
    sink = DocumentAuditSink(collection)

    asyncio.run(sink.log(_record(batch_size=42)))

    assert len(collection.documents) == 1
    document = collection.documents[0]
    assert document["cron_name"] == "nightly-sync"
    assert document["execution_status"] == "Success"
    assert document["batch_size"] == 42
    assert document["remarks"] is None


def test_document_sink_error_policy():
    asyncio.run(DocumentAuditSink(BrokenCollection()).log(_record()))

    strict = DocumentAuditSink(BrokenCollection(), raise_errors=True)
    with pytest.raises(ConnectionError):
        asyncio.run(strict.log(_record()))


def test_document_sink_requires_insert_one():
    with pytest.raises(TypeError):
        DocumentAuditSink(object())


class SlowSyncCollection(SyncCollection):
    def insert_one(self, document: dict) -> None:
        time.sleep(0.5)
        super().insert_one(document)


def test_document_sink_sync_insert_does_not_block_event_loop():
    collection = SlowSyncCollection()
    sink = DocumentAuditSink(collection)
    assert sink.is_async is False

    async def main() -> float:
        ticks: list[float] = []
        done = asyncio.Event()

        async def ticker() -> None:
            while not done.is_set():
                ticks.append(time.monotonic())
                await asyncio.sleep(0.05)

        ticker_task = asyncio.create_task(ticker())
        await asyncio.sleep(0)
        await sink.log(_record())
        done.set()
        await ticker_task
        return max(b - a for a, b in zip(ticks, ticks[1:]))

    max_gap = asyncio.run(main())

    assert len(collection.documents) == 1
    assert max_gap < 0.2


class FutureCollection(SyncCollection):
    """insert_one 不是协程函数，但返回可等待对象"""

    def insert_one(self, document: dict):  # type: ignore[override]
        self.documents.append(document)
        return asyncio.sleep(0)


def test_document_sink_async_detection_and_override():
    assert DocumentAuditSink(AsyncCollection()).is_async is True

    collection = FutureCollection()
    sink = DocumentAuditSink(collection, is_async=True)
    asyncio.run(sink.log(_record()))

    assert len(collection.documents) == 1
