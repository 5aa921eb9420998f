import asyncio
import itertools
import os
import sys
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Ensure project root is on path
ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from tireworks.bindings import BindingRegistry, DataSourceBinding  # noqa: E402
from tireworks.database.models import Base  # noqa: E402
from tireworks.kinds import KIND_SPECS, DataKind, spec_for  # noqa: E402


class FakeStore:
    """In-memory store with knobs for the failure modes bindings must handle.

    - `insert_returns_none`: acknowledge inserts without echoing the row.
    - `echo_without_identity`: commit inserts but echo only the submitted
      values, without the store-assigned `id` / `created_at`.
    - `fail_with[op]`: raise the given exception from that operation.
    - `freeze_reads()`: the read path keeps serving the current rows until
      `thaw_reads()`, like a lagging replica.
    - `fetch_gate`: when set, `fetch_all` waits on it before answering.
    """

    def __init__(self, rows=None, ids=None, created_at=None):
        self.rows: List[Dict[str, Any]] = [dict(r) for r in rows or []]
        self.calls: List[tuple] = []
        self.insert_returns_none = False
        self.echo_without_identity = False
        self.fail_with: Dict[str, Exception] = {}
        self.fetch_gate: Optional[asyncio.Event] = None
        self._frozen: Optional[List[Dict[str, Any]]] = None
        self._ids = iter(ids) if ids is not None else (f"id-{n}" for n in itertools.count(1))
        self.created_at = created_at or datetime(2024, 1, 10, 12, 0, 0)

    def count(self, op: str) -> int:
        return sum(1 for call in self.calls if call[0] == op)

    def freeze_reads(self) -> None:
        self._frozen = [dict(r) for r in self.rows]

    def thaw_reads(self) -> None:
        self._frozen = None

    def _record(self, op: str, *args: Any) -> None:
        self.calls.append((op,) + args)
        exc = self.fail_with.get(op)
        if exc is not None:
            raise exc

    async def fetch_all(self) -> List[Dict[str, Any]]:
        self._record("fetch_all")
        if self.fetch_gate is not None:
            await self.fetch_gate.wait()
        source = self._frozen if self._frozen is not None else self.rows
        return [dict(r) for r in source]

    async def insert(self, values: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        self._record("insert", dict(values))
        if self.insert_returns_none:
            return None
        row = {**values, "id": next(self._ids), "created_at": self.created_at}
        self.rows.append(row)
        if self.echo_without_identity:
            return dict(values)
        return dict(row)

    async def update(self, entity_id: str, patch: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        self._record("update", entity_id, dict(patch))
        for row in self.rows:
            if row["id"] == entity_id:
                row.update(patch)
                return dict(row)
        return None

    async def delete(self, entity_id: str) -> bool:
        self._record("delete", entity_id)
        before = len(self.rows)
        self.rows = [r for r in self.rows if r["id"] != entity_id]
        return len(self.rows) < before


def make_binding(kind: DataKind, store: FakeStore) -> DataSourceBinding:
    return DataSourceBinding(spec_for(kind), store)


def sale_payload(**overrides: Any) -> Dict[str, Any]:
    payload = {
        "tire_name": "X",
        "quantity": 3,
        "sale_value": 150.00,
        "sale_date": "2024-01-10",
    }
    payload.update(overrides)
    return payload


def cost_row(entity_id: str, archived: bool = False, **overrides: Any) -> Dict[str, Any]:
    row = {
        "id": entity_id,
        "created_at": datetime(2024, 1, 1, 9, 0, 0),
        "name": f"Cost {entity_id}",
        "amount": 100.0,
        "category": "general",
        "description": None,
        "archived": archived,
    }
    row.update(overrides)
    return row


@pytest.fixture()
def fake_stores():
    return {kind: FakeStore() for kind in KIND_SPECS}


@pytest.fixture()
def registry(fake_stores):
    reg = BindingRegistry(fake_stores)
    try:
        yield reg
    finally:
        reg.close()


@pytest.fixture()
def sql_engine():
    engine = create_engine("sqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session(sql_engine):
    Session = sessionmaker(bind=sql_engine, autoflush=False, autocommit=False)
    sess = Session()
    try:
        yield sess
    finally:
        sess.close()
