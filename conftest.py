import asyncio
import copy
from datetime import datetime, timedelta, timezone

import pytest

from cleantrack.core import clock
from cleantrack.services import photo_service as photo_service_module
from cleantrack.services import report_id_service as report_id_module
from cleantrack.services import report_service as report_service_module
from cleantrack.services.auth_service import auth_service
from cleantrack.services.commodity_service import commodity_service
from cleantrack.services.report_id_service import report_id_service
from cleantrack.services.report_service import report_service
from cleantrack.services.user_service import user_service
import cleantrack.auth.dependencies as dependencies_module


class FakeDB:
    """In-memory stand-in for DatabaseService (same tuple results)."""

    def __init__(self):
        self.collections = {}
        self.counters = {}
        self.calls = []
        self.failing = set()
        self.yield_after_read = False
        self._push_counter = 0

    def seed(self, collection, documents):
        for doc in documents:
            self.collections.setdefault(collection, {})[doc["id"]] = copy.deepcopy(doc)

    def calls_to(self, method):
        return [call for call in self.calls if call[0] == method]

    async def _after_read(self):
        # Lets other tasks run between a read and the following write
        if self.yield_after_read:
            await asyncio.sleep(0)

    async def create_document(self, collection, data, document_id=None, validate=True):
        self.calls.append(("create_document", collection, document_id))
        if "create_document" in self.failing:
            return False, None, "write failed"
        if not document_id:
            self._push_counter += 1
            document_id = f"-Npush{self._push_counter:04d}"
        self.collections.setdefault(collection, {})[document_id] = {**copy.deepcopy(data), "id": document_id}
        return True, document_id, None

    async def get_document(self, collection, document_id):
        self.calls.append(("get_document", collection, document_id))
        if "get_document" in self.failing:
            return False, None, "read failed"
        doc = self.collections.get(collection, {}).get(document_id)
        await self._after_read()
        return True, copy.deepcopy(doc) if doc else None, None

    async def get_all_documents(self, collection):
        self.calls.append(("get_all_documents", collection, None))
        if "get_all_documents" in self.failing:
            return False, [], "read failed"
        docs = [copy.deepcopy(d) for d in self.collections.get(collection, {}).values()]
        await self._after_read()
        return True, docs, None

    async def query_documents(self, collection, filters=None):
        self.calls.append(("query_documents", collection, filters))
        if "query_documents" in self.failing:
            return False, [], "query failed"
        docs = [copy.deepcopy(d) for d in self.collections.get(collection, {}).values()]
        for field, op, value in filters or []:
            if op == "==":
                docs = [d for d in docs if d.get(field) == value]
        return True, docs, None

    async def update_document(self, collection, document_id, data, validate=True):
        self.calls.append(("update_document", collection, document_id))
        if "update_document" in self.failing:
            return False, "update failed"
        node = self.collections.setdefault(collection, {}).setdefault(document_id, {"id": document_id})
        node.update(copy.deepcopy(data))
        return True, None

    async def delete_document(self, collection, document_id):
        self.calls.append(("delete_document", collection, document_id))
        if "delete_document" in self.failing:
            return False, "delete failed"
        self.collections.get(collection, {}).pop(document_id, None)
        return True, None

    async def get_counter(self, counter_id):
        self.calls.append(("get_counter", "counters", counter_id))
        if "get_counter" in self.failing:
            return False, None, "read failed"
        value = self.counters.get(counter_id)
        await self._after_read()
        return True, value, None

    async def increment_counter(self, counter_id, seed=0):
        self.calls.append(("increment_counter", "counters", counter_id))
        if "increment_counter" in self.failing:
            return False, None, "transaction failed"
        current = self.counters.get(counter_id)
        self.counters[counter_id] = (current if isinstance(current, int) else seed) + 1
        return True, self.counters[counter_id], None


class FrozenClock:
    def __init__(self, now):
        self.now = now
        self.step = None

    def __call__(self):
        current = self.now
        # Optional drift: every read moves the clock forward
        if self.step is not None:
            self.now = self.now + self.step
        return current

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def fake_db(monkeypatch):
    db = FakeDB()
    for service in (report_service, report_id_service, user_service, commodity_service, auth_service):
        monkeypatch.setattr(service, "db", db)
    monkeypatch.setattr(dependencies_module, "database_service", db)
    return db


@pytest.fixture
def frozen_clock(monkeypatch):
    fake = FrozenClock(datetime(2025, 3, 1, 8, 15, 30, 123000, tzinfo=timezone.utc))
    monkeypatch.setattr(clock, "utc_now", fake)
    monkeypatch.setattr(report_id_module, "utc_now", fake)
    monkeypatch.setattr(report_service_module, "utc_now", fake)
    monkeypatch.setattr(photo_service_module, "utc_now", fake)
    return fake
