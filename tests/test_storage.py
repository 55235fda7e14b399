"""
Tests for storage backends and transaction support
"""

import pytest
import tempfile
import os
import threading
import time
from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from bank_portal.storage import (
    InMemoryStorage, SQLiteStorage, StorageRecord, create_storage
)


class Color(Enum):
    RED = "red"
    BLUE = "blue"


@dataclass
class SampleRecord(StorageRecord):
    name: str
    amount: Decimal
    color: Color = Color.RED
    closed_at: Optional[datetime] = None


def make_record(record_id: str = "rec_1", amount: str = "100.50") -> SampleRecord:
    now = datetime.now(timezone.utc)
    return SampleRecord(
        id=record_id,
        created_at=now,
        updated_at=now,
        name="Sample",
        amount=Decimal(amount),
        color=Color.BLUE
    )


class TestStorageRecord:
    """Test record serialization"""

    def test_to_dict_serializes_values(self):
        record = make_record()
        data = record.to_dict()

        assert data["amount"] == "100.50"
        assert data["color"] == "blue"
        assert data["closed_at"] is None
        assert isinstance(data["created_at"], str)

    def test_from_dict_restores_types(self):
        record = make_record()
        restored = SampleRecord.from_dict(record.to_dict())

        assert restored == record
        assert isinstance(restored.amount, Decimal)
        assert restored.color is Color.BLUE
        assert restored.created_at.tzinfo is not None


class TestInMemoryStorage:
    """Test basic CRUD operations with InMemoryStorage"""

    def setup_method(self):
        self.storage = InMemoryStorage()

    def test_basic_operations(self):
        self.storage.save("items", "a", {"id": "a", "kind": "x"})
        self.storage.save("items", "b", {"id": "b", "kind": "y"})

        assert self.storage.load("items", "a") == {"id": "a", "kind": "x"}
        assert self.storage.exists("items", "b")
        assert not self.storage.exists("items", "missing")
        assert self.storage.count("items") == 2
        assert [r["id"] for r in self.storage.load_all("items")] == ["a", "b"]

        assert self.storage.delete("items", "a")
        assert not self.storage.delete("items", "a")
        assert self.storage.count("items") == 1

        self.storage.clear_table("items")
        assert self.storage.count("items") == 0

    def test_loaded_records_are_copies(self):
        self.storage.save("items", "a", {"id": "a", "tags": ["one"]})
        loaded = self.storage.load("items", "a")
        loaded["tags"].append("two")

        assert self.storage.load("items", "a")["tags"] == ["one"]

    def test_find_serializes_filter_values(self):
        self.storage.save("items", "a", make_record("a").to_dict())
        self.storage.save("items", "b", {**make_record("b").to_dict(), "color": "red"})

        found = self.storage.find("items", {"color": Color.BLUE})
        assert [r["id"] for r in found] == ["a"]

        assert self.storage.find("items", {"amount": Decimal("100.50"), "color": Color.RED})[0]["id"] == "b"

    def test_atomic_rolls_back_on_error(self):
        self.storage.save("items", "a", {"id": "a", "value": 1})

        with pytest.raises(RuntimeError):
            with self.storage.atomic():
                self.storage.save("items", "a", {"id": "a", "value": 2})
                self.storage.save("items", "b", {"id": "b", "value": 3})
                raise RuntimeError("boom")

        assert self.storage.load("items", "a")["value"] == 1
        assert not self.storage.exists("items", "b")

    def test_nested_atomic_joins_outer_block(self):
        with pytest.raises(RuntimeError):
            with self.storage.atomic():
                with self.storage.atomic():
                    self.storage.save("items", "inner", {"id": "inner"})
                raise RuntimeError("outer failure")

        assert not self.storage.exists("items", "inner")

    def test_atomic_commits(self):
        with self.storage.atomic():
            self.storage.save("items", "a", {"id": "a"})
        assert self.storage.exists("items", "a")


class TestSQLiteStorage:
    """Test the SQLite backend against a temporary file"""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = os.path.join(self.temp_dir, "portal.db")
        self.storage = SQLiteStorage(self.db_path)

    def teardown_method(self):
        self.storage.close()

    def test_round_trip_and_persistence(self):
        record = make_record()
        self.storage.save("records", record.id, record.to_dict())
        self.storage.close()

        reopened = SQLiteStorage(self.db_path)
        try:
            restored = SampleRecord.from_dict(reopened.load("records", record.id))
            assert restored == record
            assert reopened.count("records") == 1
        finally:
            reopened.close()
        self.storage = SQLiteStorage(self.db_path)

    def test_update_keeps_insertion_order(self):
        self.storage.save("items", "a", {"id": "a", "v": 1})
        self.storage.save("items", "b", {"id": "b", "v": 1})
        self.storage.save("items", "a", {"id": "a", "v": 2})

        records = self.storage.load_all("items")
        assert [r["id"] for r in records] == ["a", "b"]
        assert records[0]["v"] == 2

    def test_atomic_rollback(self):
        self.storage.save("items", "a", {"id": "a", "v": 1})

        with pytest.raises(ValueError):
            with self.storage.atomic():
                self.storage.save("items", "a", {"id": "a", "v": 2})
                self.storage.save("fresh_table", "x", {"id": "x"})
                raise ValueError("rollback")

        assert self.storage.load("items", "a")["v"] == 1
        assert self.storage.count("fresh_table") == 0

        # The table can still be written after its creation was rolled back
        self.storage.save("fresh_table", "y", {"id": "y"})
        assert self.storage.exists("fresh_table", "y")

    def test_find(self):
        self.storage.save("items", "a", {"id": "a", "is_paid": False})
        self.storage.save("items", "b", {"id": "b", "is_paid": True})

        assert [r["id"] for r in self.storage.find("items", {"is_paid": False})] == ["a"]


@pytest.mark.parametrize("make_storage", [InMemoryStorage, SQLiteStorage], ids=["memory", "sqlite"])
class TestAtomicAcrossThreads:
    """A failing block in one thread must not discard another thread's writes"""

    def test_rollback_keeps_other_thread_writes(self, make_storage):
        storage = make_storage()
        entered = threading.Event()
        errors = []

        def failing_job():
            try:
                with storage.atomic():
                    storage.save("items", "job", {"id": "job"})
                    entered.set()
                    time.sleep(0.1)
                    raise RuntimeError("job failed")
            except RuntimeError as e:
                errors.append(e)

        job = threading.Thread(target=failing_job)
        job.start()
        assert entered.wait(timeout=5)

        # Waits for the job's block to finish before writing
        with storage.atomic():
            storage.save("items", "request", {"id": "request"})
        job.join(timeout=5)

        assert len(errors) == 1
        assert storage.exists("items", "request")
        assert not storage.exists("items", "job")
        storage.close()

    def test_nesting_depth_is_per_thread(self, make_storage):
        storage = make_storage()
        seen = []

        def worker():
            with storage.atomic():
                seen.append(storage._local.depth)

        with storage.atomic():
            assert storage._local.depth == 1
            thread = threading.Thread(target=worker)
            thread.start()
            # The worker blocks on the lock until this block ends
            thread.join(timeout=0.1)
            assert seen == []
        thread.join(timeout=5)

        assert seen == [1]
        assert storage._local.depth == 0
        storage.close()


class TestCreateStorage:

    def test_memory_url(self):
        assert isinstance(create_storage("memory://"), InMemoryStorage)

    def test_sqlite_memory_url(self):
        storage = create_storage("sqlite:///")
        assert isinstance(storage, SQLiteStorage)
        assert storage.db_path == ":memory:"
        storage.close()

    def test_unsupported_url(self):
        with pytest.raises(ValueError):
            create_storage("postgresql://localhost/bank")
