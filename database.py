# database.py - SQL-backed record store
# daily_picks / final_picks / alerts rows stored as JSON payloads keyed by (table, id).
# Claim fields are mirrored into indexed columns so batch fetches filter in SQL.

import asyncio
import json
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import Column, DateTime, Integer, String, Text, UniqueConstraint, create_engine, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from core.record_store import (
    DuplicateRecordError,
    Filters,
    Record,
    RecordStoreError,
    matches_filters,
    new_record_id,
)

logger = logging.getLogger("database")

Base = declarative_base()

SQLITE_FALLBACK_URL = "sqlite:///./local.db"

# Payload fields copied into their own indexed column on every write
INDEXED_FIELDS = ("play_status", "final_grading_status")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _column_value(value: Any) -> Optional[str]:
    return None if value is None else str(value)


# ============================================================================
# MODELS
# ============================================================================

class StoredRecord(Base):
    """One record of a logical table. Columns beyond id live in `payload`."""
    __tablename__ = "edge_records"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    table_name = Column(String(64), nullable=False, index=True)
    record_id = Column(String(128), nullable=False)
    payload = Column(Text, nullable=False)
    play_status = Column(String(32), nullable=True, index=True)
    final_grading_status = Column(String(32), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    __table_args__ = (
        UniqueConstraint("table_name", "record_id", name="uq_edge_records_table_id"),
    )

    @staticmethod
    def row_values(record: Mapping[str, Any]) -> Dict[str, Any]:
        """Column values for a record: JSON payload plus the mirrored claim fields."""
        body = {k: v for k, v in record.items() if k != "id"}
        values: Dict[str, Any] = {"payload": json.dumps(body, default=str)}
        for name in INDEXED_FIELDS:
            values[name] = _column_value(record.get(name))
        return values

    def to_dict(self) -> Record:
        record = json.loads(self.payload) if self.payload else {}
        record["id"] = self.record_id
        return record

    def set_payload(self, record: Mapping[str, Any]) -> None:
        for name, value in self.row_values(record).items():
            setattr(self, name, value)


# ============================================================================
# HELPERS
# ============================================================================

def normalize_database_url(database_url: Optional[str]) -> str:
    """Empty -> local SQLite. postgres:// -> postgresql:// (SQLAlchemy dialect name)."""
    if not database_url:
        return SQLITE_FALLBACK_URL
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql://", 1)
    return database_url


# ============================================================================
# STORE
# ============================================================================

class SqlRecordStore:
    """
    RecordStore over SQLAlchemy.

    Session work is synchronous and runs in a worker thread so the async
    orchestrator loop is never blocked on I/O.
    """

    def __init__(self, database_url: Optional[str] = None):
        url = normalize_database_url(database_url)
        if url.startswith("sqlite"):
            self.engine = create_engine(url, connect_args={"check_same_thread": False})
            self.db_type = "sqlite"
        else:
            self.engine = create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10)
            self.db_type = "postgresql"
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database: record store ready (%s)", self.db_type)

    @contextmanager
    def session(self):
        """Session context manager: commit on success, rollback + RecordStoreError on failure."""
        db: Session = self.SessionLocal()
        try:
            yield db
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise DuplicateRecordError(f"Duplicate record: {e.orig}") from e
        except SQLAlchemyError as e:
            db.rollback()
            raise RecordStoreError(f"Database error: {e}") from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _row(self, db: Session, table: str, record_id: str) -> Optional[StoredRecord]:
        return db.query(StoredRecord).filter(
            StoredRecord.table_name == table,
            StoredRecord.record_id == str(record_id),
        ).one_or_none()

    # --- sync implementations -------------------------------------------------

    def _fetch_impl(self, table: str, filters: Filters, limit: int) -> List[Record]:
        """Indexed filters narrow the scan in SQL; the rest are matched on the decoded payload."""
        results: List[Record] = []
        with self.session() as db:
            query = db.query(StoredRecord).filter(StoredRecord.table_name == table)
            db_filters = [name for name in INDEXED_FIELDS if name in filters]
            for name in db_filters:
                column = getattr(StoredRecord, name)
                value = filters[name]
                query = query.filter(column.is_(None) if value is None else column == _column_value(value))
            query = query.order_by(StoredRecord.pk)
            if len(db_filters) == len(filters):
                query = query.limit(limit)

            for row in query.all():
                record = row.to_dict()
                if matches_filters(record, filters):
                    results.append(record)
                    if len(results) >= limit:
                        break
        return results

    def _update_impl(self, table: str, record_id: str, fields: Mapping[str, Any]) -> None:
        with self.session() as db:
            row = self._row(db, table, record_id)
            if row is None:
                raise RecordStoreError(f"{table}: no record with id {record_id}")
            record = row.to_dict()
            record.update(fields)
            row.set_payload(record)

    def _insert_impl(self, table: str, record: Mapping[str, Any]) -> str:
        record_id = str(record.get("id") or new_record_id())
        with self.session() as db:
            if self._row(db, table, record_id) is not None:
                raise DuplicateRecordError(f"{table}: duplicate id {record_id}")
            row = StoredRecord(table_name=table, record_id=record_id)
            row.set_payload(record)
            db.add(row)
        return record_id

    def _claim_impl(self, table: str, record_id: str, field: str, expected: Any, new: Any) -> bool:
        """
        Compare-and-swap on the whole payload: the UPDATE only matches if the
        row still holds the payload we read, so of two overlapping claims
        exactly one sees rowcount == 1.
        """
        with self.session() as db:
            row = self._row(db, table, record_id)
            if row is None:
                return False
            record = row.to_dict()
            if record.get(field) != expected:
                return False
            record[field] = new
            result = db.execute(
                update(StoredRecord)
                .where(StoredRecord.pk == row.pk, StoredRecord.payload == row.payload)
                .values(**StoredRecord.row_values(record), updated_at=utc_now())
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

    # --- RecordStore protocol -------------------------------------------------

    async def fetch(self, table: str, filters: Filters, limit: int) -> List[Record]:
        return await asyncio.to_thread(self._fetch_impl, table, filters, limit)

    async def update(self, table: str, record_id: str, fields: Mapping[str, Any]) -> None:
        await asyncio.to_thread(self._update_impl, table, record_id, dict(fields))

    async def insert(self, table: str, record: Mapping[str, Any]) -> str:
        return await asyncio.to_thread(self._insert_impl, table, dict(record))

    async def claim(self, table: str, record_id: str, field: str, expected: Any, new: Any) -> bool:
        return await asyncio.to_thread(self._claim_impl, table, record_id, field, expected, new)

    def seed(self, table: str, records: List[Mapping[str, Any]]) -> int:
        """Bulk-load records synchronously (scripts, fixtures). Returns count inserted."""
        for record in records:
            self._insert_impl(table, record)
        return len(records)

    def count(self, table: str) -> int:
        with self.session() as db:
            return db.query(StoredRecord).filter(StoredRecord.table_name == table).count()


def init_database(database_url: Optional[str] = None) -> SqlRecordStore:
    """Build the SQL record store. Raises RecordStoreError if the database is unreachable."""
    try:
        return SqlRecordStore(database_url)
    except SQLAlchemyError as e:
        logger.error("Database initialization failed: %s", e)
        raise RecordStoreError(f"Database initialization failed: {e}") from e


def get_database_status(store: Optional[SqlRecordStore]) -> Dict[str, Any]:
    if store is None:
        return {"enabled": False, "type": "none"}
    return {"enabled": True, "type": store.db_type}
