import copy
import itertools
from datetime import datetime, timedelta, timezone

import pytest

from storage.gateway import ConnectivityError, RelationNotFound, RowNotFound
from storage.local_cache import LocalCache


class FakeGateway:
    """In-memory stand-in honouring the FirestoreGateway contract."""

    def __init__(self):
        self.tables = {}
        self.blobs = {}
        self.down = False
        self.missing_relations = set()
        self._ids = itertools.count(1)
        self.calls = []

    def _check(self, op, collection):
        self.calls.append((op, collection))
        if self.down:
            raise ConnectivityError("gateway unreachable", collection=collection, op=op)
        if collection in self.missing_relations:
            raise RelationNotFound(f"relation {collection} does not exist", collection=collection, op=op)

    def _table(self, collection):
        return self.tables.setdefault(collection, {})

    def query(self, collection, filters=(), order_by=None, descending=False, limit=None):
        self._check("query", collection)
        rows = [dict(copy.deepcopy(r), id=rid) for rid, r in self._table(collection).items()]
        ops = {
            "==": lambda a, b: a == b,
            ">=": lambda a, b: a is not None and a >= b,
            "<=": lambda a, b: a is not None and a <= b,
        }
        for field, op, value in filters:
            rows = [r for r in rows if ops[op](r.get(field), value)]
        if order_by:
            rows.sort(key=lambda r: r.get(order_by) or "", reverse=descending)
        return rows[:limit] if limit else rows

    def get(self, collection, row_id):
        self._check("get", collection)
        row = self._table(collection).get(row_id)
        if row is None:
            raise RowNotFound(f"{collection}/{row_id} not found", collection=collection, op="get")
        return dict(copy.deepcopy(row), id=row_id)

    def insert(self, collection, payload, row_id=None):
        self._check("insert", collection)
        row_id = row_id or f"row-{next(self._ids)}"
        self._table(collection)[row_id] = copy.deepcopy(payload)
        return dict(copy.deepcopy(payload), id=row_id)

    def update(self, collection, row_id, payload):
        self._check("update", collection)
        if row_id not in self._table(collection):
            raise RowNotFound(f"{collection}/{row_id} not found", collection=collection, op="update")
        self._table(collection)[row_id].update(copy.deepcopy(payload))
        return self.get(collection, row_id)

    def upsert(self, collection, row_id, payload):
        self._check("upsert", collection)
        self._table(collection).setdefault(row_id, {}).update(copy.deepcopy(payload))
        return self.get(collection, row_id)

    def delete(self, collection, row_id):
        self._check("delete", collection)
        self._table(collection).pop(row_id, None)

    def count(self, collection):
        self._check("count", collection)
        return len(self._table(collection))

    def put_blob(self, bucket, path, content, content_type="application/octet-stream"):
        self._check("put_blob", bucket)
        self.blobs[(bucket, path)] = content
        return f"https://storage.googleapis.com/{bucket}/{path}"

    def ping(self, timeout_s=0.2):
        return {"ok": not self.down}


class TickingClock:
    """Each call returns a time one second after the previous one."""

    def __init__(self, start=datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        self.now = self.now + timedelta(seconds=1)
        return self.now


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def cache(tmp_path):
    return LocalCache(tmp_path / "local_store.json")


@pytest.fixture
def clock():
    return TickingClock()
