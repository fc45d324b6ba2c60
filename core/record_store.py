"""
RECORD_STORE.PY - Table-oriented record persistence interface
=============================================================

The grading orchestrator talks to storage only through RecordStore:

    fetch(table, filters, limit)                -> list of record dicts
    update(table, record_id, fields)            -> None
    insert(table, record)                       -> stored record id
                                                   (DuplicateRecordError if the id exists)
    claim(table, record_id, field, expected, new) -> bool

Filter semantics: {field: value} is an equality match; a value of None
matches a field that is NULL or absent.

claim() is a conditional update used as a lightweight lock: it succeeds only
when the record's current `field` equals `expected`, so two overlapping
grading runs can never both own the same record.

Implementations:
    InMemoryRecordStore (this module) - tests and dry runs
    SqlRecordStore (database.py)      - SQLAlchemy, JSON payload rows
"""

import copy
import uuid
from typing import Any, Dict, List, Mapping, Optional, Protocol

Record = Dict[str, Any]
Filters = Mapping[str, Any]


class RecordStoreError(RuntimeError):
    """Raised when a store operation cannot be completed."""


class DuplicateRecordError(RecordStoreError):
    """insert() with an id that already exists in the table."""


class RecordStore(Protocol):
    async def fetch(self, table: str, filters: Filters, limit: int) -> List[Record]:
        ...

    async def update(self, table: str, record_id: str, fields: Mapping[str, Any]) -> None:
        ...

    async def insert(self, table: str, record: Mapping[str, Any]) -> str:
        ...

    async def claim(self, table: str, record_id: str, field: str, expected: Any, new: Any) -> bool:
        ...


def matches_filters(record: Mapping[str, Any], filters: Filters) -> bool:
    for key, expected in filters.items():
        if record.get(key) != expected:
            return False
    return True


def new_record_id() -> str:
    return uuid.uuid4().hex


class InMemoryRecordStore:
    """
    Dict-backed RecordStore. Records are deep-copied in and out so callers
    can never mutate stored state by accident.
    """

    def __init__(self, tables: Optional[Mapping[str, List[Mapping[str, Any]]]] = None):
        self._tables: Dict[str, Dict[str, Record]] = {}
        for table, records in (tables or {}).items():
            for record in records:
                self._put(table, record)

    def _put(self, table: str, record: Mapping[str, Any]) -> str:
        stored = copy.deepcopy(dict(record))
        record_id = str(stored.get("id") or new_record_id())
        stored["id"] = record_id
        rows = self._tables.setdefault(table, {})
        if record_id in rows:
            raise DuplicateRecordError(f"{table}: duplicate id {record_id}")
        rows[record_id] = stored
        return record_id

    def _get(self, table: str, record_id: str) -> Record:
        try:
            return self._tables[table][str(record_id)]
        except KeyError:
            raise RecordStoreError(f"{table}: no record with id {record_id}") from None

    def all(self, table: str) -> List[Record]:
        """Snapshot of every record in `table`, insertion order."""
        return [copy.deepcopy(r) for r in self._tables.get(table, {}).values()]

    def get(self, table: str, record_id: str) -> Optional[Record]:
        record = self._tables.get(table, {}).get(str(record_id))
        return copy.deepcopy(record) if record is not None else None

    async def fetch(self, table: str, filters: Filters, limit: int) -> List[Record]:
        rows = [r for r in self._tables.get(table, {}).values() if matches_filters(r, filters)]
        return [copy.deepcopy(r) for r in rows[:limit]]

    async def update(self, table: str, record_id: str, fields: Mapping[str, Any]) -> None:
        self._get(table, record_id).update(copy.deepcopy(dict(fields)))

    async def insert(self, table: str, record: Mapping[str, Any]) -> str:
        return self._put(table, record)

    async def claim(self, table: str, record_id: str, field: str, expected: Any, new: Any) -> bool:
        record = self._tables.get(table, {}).get(str(record_id))
        if record is None or record.get(field) != expected:
            return False
        record[field] = new
        return True
