"""
services/store.py - Entity Store contract and its in-memory implementation.

A store owns the canonical records of every entity kind. It assigns ids and
creation stamps, merges partial updates and keeps insertion order. It knows
nothing about cross-entity rules; those live in services/relationships.py.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum

import pydantic

from config import ID_PREFIXES
from schemas import Farm, Record, Robot, SensorReading, User
from services.errors import NotFound, ValidationError

log = logging.getLogger(__name__)


class Kind(str, Enum):
    USERS = "users"
    FARMS = "farms"
    ROBOTS = "robots"
    SENSOR_READINGS = "sensor_readings"

    @property
    def record_type(self) -> type[Record]:
        return RECORD_TYPES[self]

    @property
    def stamp_field(self) -> str:
        return STAMP_FIELDS[self]

    @property
    def prefix(self) -> str:
        return ID_PREFIXES[self.value]


RECORD_TYPES: dict[Kind, type[Record]] = {
    Kind.USERS: User,
    Kind.FARMS: Farm,
    Kind.ROBOTS: Robot,
    Kind.SENSOR_READINGS: SensorReading,
}

# Field stamped with the current time on insert
STAMP_FIELDS = {
    Kind.USERS: "created_at",
    Kind.FARMS: "created_at",
    Kind.ROBOTS: "last_active",
    Kind.SENSOR_READINGS: "timestamp",
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_record(kind: Kind, data: dict) -> Record:
    """Validate a full field mapping into a record, translating pydantic errors."""
    try:
        return kind.record_type.model_validate(data)
    except pydantic.ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or kind.value}: {err['msg']}"
            for err in exc.errors()
        )
        raise ValidationError(f"Invalid {kind.value} record: {problems}") from exc


def initial_fields(kind: Kind, partial: dict) -> dict:
    """Creation stamp defaulted to now, then caller fields merged over it."""
    data = {kind.stamp_field: utcnow()}
    for key, value in partial.items():
        if key == kind.stamp_field and value is None:
            continue
        data[key] = value
    return data


def merge_record(kind: Kind, current: Record, partial: dict) -> Record:
    """Shallow merge: fields absent from ``partial`` keep their value."""
    data = current.model_dump()
    data.update(partial)
    data["id"] = current.id
    return build_record(kind, data)


class Store:
    """
    Contract shared by every store backend.

    ``get_by_id`` returns None for unknown ids; ``update`` and ``remove``
    raise NotFound. ``transaction()`` groups calls so that an exception
    undoes every change made inside it. Nested transactions join the outer one.
    """

    def get_all(self, kind: Kind) -> list[Record]:
        raise NotImplementedError

    def get_by_id(self, kind: Kind, entity_id: str) -> Record | None:
        raise NotImplementedError

    def insert(self, kind: Kind, partial: dict) -> Record:
        raise NotImplementedError

    def update(self, kind: Kind, entity_id: str, partial: dict) -> Record:
        raise NotImplementedError

    def remove(self, kind: Kind, entity_id: str) -> Record:
        raise NotImplementedError

    def transaction(self):
        raise NotImplementedError

    def require(self, kind: Kind, entity_id: str) -> Record:
        record = self.get_by_id(kind, entity_id)
        if record is None:
            raise NotFound.for_id(kind.value, entity_id)
        return record

    def find(self, kind: Kind, **criteria) -> list[Record]:
        """Records whose fields equal every given value, in insertion order."""
        return [
            record for record in self.get_all(kind)
            if all(getattr(record, field) == value for field, value in criteria.items())
        ]

    def count(self, kind: Kind) -> int:
        return len(self.get_all(kind))


class InMemoryStore(Store):
    """
    Ordered dicts keyed by id, one per kind. Lives as long as the process.

    Request handlers run in a thread pool, so a reentrant lock serializes
    transactions: a thread holds it from the outermost ``transaction()`` to
    its commit or rollback.
    """

    def __init__(self):
        self._records: dict[Kind, dict[str, Record]] = {kind: {} for kind in Kind}
        self._sequences: dict[Kind, int] = {kind: 0 for kind in Kind}
        self._depth = 0
        self._lock = threading.RLock()

    def get_all(self, kind: Kind) -> list[Record]:
        with self._lock:
            return list(self._records[kind].values())

    def get_by_id(self, kind: Kind, entity_id: str) -> Record | None:
        with self._lock:
            return self._records[kind].get(entity_id)

    def insert(self, kind: Kind, partial: dict) -> Record:
        with self._lock:
            data = initial_fields(kind, partial)
            ordinal = self._sequences[kind] + 1
            data["id"] = f"{kind.prefix}{ordinal}"
            record = build_record(kind, data)
            # Only consume the ordinal once the record is valid
            self._sequences[kind] = ordinal
            self._records[kind][record.id] = record
            return record

    def update(self, kind: Kind, entity_id: str, partial: dict) -> Record:
        with self._lock:
            current = self.require(kind, entity_id)
            record = merge_record(kind, current, partial)
            self._records[kind][entity_id] = record
            return record

    def remove(self, kind: Kind, entity_id: str) -> Record:
        with self._lock:
            self.require(kind, entity_id)
            return self._records[kind].pop(entity_id)

    @contextmanager
    def transaction(self) -> Iterator["InMemoryStore"]:
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            # Records are frozen: copying the per-kind dicts is a full snapshot
            records = {kind: dict(items) for kind, items in self._records.items()}
            sequences = dict(self._sequences)
            self._depth = 1
            try:
                yield self
            except Exception:
                self._records = records
                self._sequences = sequences
                log.debug("In-memory transaction rolled back.")
                raise
            finally:
                self._depth = 0
