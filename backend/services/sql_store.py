"""
services/sql_store.py - Store implementation over SQLAlchemy tables.

Each public call runs in its own transaction unless it is made inside
``transaction()``, in which case the whole block commits or rolls back once.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from sqlalchemy import inspect, select
from sqlalchemy.orm import Session, sessionmaker

from database import SessionLocal
from models import FarmRow, IdSequence, RobotRow, SensorReadingRow, UserRow
from schemas import Record
from services.errors import NotFound
from services.store import Kind, Store, build_record, initial_fields, merge_record

log = logging.getLogger(__name__)

ROW_TYPES = {
    Kind.USERS: UserRow,
    Kind.FARMS: FarmRow,
    Kind.ROBOTS: RobotRow,
    Kind.SENSOR_READINGS: SensorReadingRow,
}


def _row_to_record(kind: Kind, row) -> Record:
    data = {
        attr.key: getattr(row, attr.key)
        for attr in inspect(row).mapper.column_attrs
        if attr.key != "pk"
    }
    if kind is Kind.FARMS:
        data["gps_coordinates"] = {
            "latitude": data.pop("latitude"),
            "longitude": data.pop("longitude"),
        }
    return build_record(kind, data)


def _apply_record(row, record: Record) -> None:
    for field, value in record.model_dump().items():
        setattr(row, field, value)


class SqlStore(Store):
    """
    One store instance is shared by every request. The open session is kept
    in a context variable, so each request thread (and each asyncio task)
    runs its own transaction and only nested calls in that context join it.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self._session_factory = session_factory
        self._session: ContextVar[Session | None] = ContextVar(
            f"sql_store_session_{id(self)}", default=None
        )

    @contextmanager
    def transaction(self) -> Iterator["SqlStore"]:
        if self._session.get() is not None:
            yield self
            return

        session = self._session_factory()
        token = self._session.set(session)
        try:
            with session.begin():
                yield self
        except Exception:
            log.debug("SQL transaction rolled back.")
            raise
        finally:
            self._session.reset(token)
            session.close()

    @contextmanager
    def _unit(self) -> Iterator[Session]:
        with self.transaction():
            yield self._session.get()

    def _row(self, session: Session, kind: Kind, entity_id: str):
        row_type = ROW_TYPES[kind]
        return session.scalars(select(row_type).where(row_type.id == entity_id)).one_or_none()

    def _next_id(self, session: Session, kind: Kind) -> str:
        sequence = session.get(IdSequence, kind.value)
        if sequence is None:
            sequence = IdSequence(kind=kind.value, last_value=0)
            session.add(sequence)
        sequence.last_value += 1
        return f"{kind.prefix}{sequence.last_value}"

    def get_all(self, kind: Kind) -> list[Record]:
        row_type = ROW_TYPES[kind]
        with self._unit() as session:
            rows = session.scalars(select(row_type).order_by(row_type.pk)).all()
            return [_row_to_record(kind, row) for row in rows]

    def get_by_id(self, kind: Kind, entity_id: str) -> Record | None:
        with self._unit() as session:
            row = self._row(session, kind, entity_id)
            return _row_to_record(kind, row) if row is not None else None

    def insert(self, kind: Kind, partial: dict) -> Record:
        with self._unit() as session:
            data = initial_fields(kind, partial)
            # Validate before drawing an id so a bad payload leaves no gap
            data["id"] = "pending"
            build_record(kind, data)
            data["id"] = self._next_id(session, kind)
            record = build_record(kind, data)

            row = ROW_TYPES[kind]()
            _apply_record(row, record)
            session.add(row)
            session.flush()
            return record

    def update(self, kind: Kind, entity_id: str, partial: dict) -> Record:
        with self._unit() as session:
            row = self._row(session, kind, entity_id)
            if row is None:
                raise NotFound.for_id(kind.value, entity_id)
            record = merge_record(kind, _row_to_record(kind, row), partial)
            _apply_record(row, record)
            session.flush()
            return record

    def remove(self, kind: Kind, entity_id: str) -> Record:
        with self._unit() as session:
            row = self._row(session, kind, entity_id)
            if row is None:
                raise NotFound.for_id(kind.value, entity_id)
            snapshot = _row_to_record(kind, row)
            session.delete(row)
            session.flush()
            return snapshot
