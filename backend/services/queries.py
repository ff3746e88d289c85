"""
services/queries.py - Read-only projections over the store.

Nothing here raises on a miss: filters return an empty list and single
lookups return None.
"""

from datetime import date, datetime, time, timezone

import pydantic

from schemas import Farm, Robot, SensorReading, User
from services.store import Kind, Store

_datetime_adapter = pydantic.TypeAdapter(datetime)
_date_adapter = pydantic.TypeAdapter(date)


def parse_instant(value: str | datetime) -> datetime | None:
    """
    Parse an ISO-8601 instant. Date-only strings mean midnight UTC and naive
    values are taken as UTC. Returns None when the value cannot be parsed.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = _datetime_adapter.validate_python(value)
        except pydantic.ValidationError:
            try:
                parsed = datetime.combine(_date_adapter.validate_python(value), time.min)
            except pydantic.ValidationError:
                return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ── Single lookups ───────────────────────────────────────────────────────────

def get_user(store: Store, user_id: str) -> User | None:
    return store.get_by_id(Kind.USERS, user_id)


def get_farm(store: Store, farm_id: str) -> Farm | None:
    return store.get_by_id(Kind.FARMS, farm_id)


def get_robot(store: Store, robot_id: str) -> Robot | None:
    return store.get_by_id(Kind.ROBOTS, robot_id)


# ── Users ────────────────────────────────────────────────────────────────────

def list_users(store: Store) -> list[User]:
    return store.get_all(Kind.USERS)


def users_by_role(store: Store, role: str) -> list[User]:
    return store.find(Kind.USERS, role=role)


def users_by_status(store: Store, status: str) -> list[User]:
    return store.find(Kind.USERS, status=status)


def pending_engineers(store: Store) -> list[User]:
    return store.find(Kind.USERS, role="engineer", status="pending_approval")


def assignable_engineers(store: Store) -> list[User]:
    """Engineers that robots can be assigned to."""
    return store.find(Kind.USERS, role="engineer", status="active")


# ── Farms ────────────────────────────────────────────────────────────────────

def list_farms(store: Store) -> list[Farm]:
    return store.get_all(Kind.FARMS)


def farms_by_farmer(store: Store, farmer_id: str) -> list[Farm]:
    return store.find(Kind.FARMS, farmer_id=farmer_id)


# ── Robots ───────────────────────────────────────────────────────────────────

def list_robots(store: Store) -> list[Robot]:
    return store.get_all(Kind.ROBOTS)


def robots_by_farm(store: Store, farm_id: str) -> list[Robot]:
    return store.find(Kind.ROBOTS, farm_id=farm_id)


def robots_by_engineer(store: Store, engineer_id: str) -> list[Robot]:
    return store.find(Kind.ROBOTS, engineer_id=engineer_id)


def search_robots(store: Store, text: str) -> list[Robot]:
    needle = text.strip().lower()
    return [robot for robot in store.get_all(Kind.ROBOTS) if needle in robot.name.lower()]


# ── Sensor Data ──────────────────────────────────────────────────────────────

def list_readings(store: Store) -> list[SensorReading]:
    return store.get_all(Kind.SENSOR_READINGS)


def readings_by_farm(store: Store, farm_id: str) -> list[SensorReading]:
    return store.find(Kind.SENSOR_READINGS, farm_id=farm_id)


def readings_by_robot(store: Store, robot_id: str) -> list[SensorReading]:
    return store.find(Kind.SENSOR_READINGS, robot_id=robot_id)


def readings_by_type(store: Store, sensor_type: str) -> list[SensorReading]:
    return store.find(Kind.SENSOR_READINGS, sensor_type=sensor_type)


def readings_by_date_range(
    store: Store, start: str | datetime, end: str | datetime
) -> list[SensorReading]:
    """Readings with ``start <= timestamp <= end``; a malformed bound matches nothing."""
    start_at = parse_instant(start)
    end_at = parse_instant(end)
    if start_at is None or end_at is None:
        return []
    return [
        reading for reading in store.get_all(Kind.SENSOR_READINGS)
        if start_at <= reading.timestamp <= end_at
    ]
