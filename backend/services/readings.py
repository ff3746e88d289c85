"""
services/readings.py - Sensor data ingestion.

Readings are written once and never updated. Ingesting a reading counts as a
sign of life from the reporting robot.
"""

import logging

from config import DEFAULT_UNITS
from schemas import SensorReading
from services.errors import ValidationError
from services.store import Kind, Store, utcnow

log = logging.getLogger(__name__)


def _ingest(store: Store, payload: dict) -> SensorReading:
    if not payload.get("robot_id"):
        raise ValidationError("robot_id is required")
    robot = store.require(Kind.ROBOTS, payload["robot_id"])
    farm_id = payload.get("farm_id") or robot.farm_id
    if farm_id is None:
        raise ValidationError(f"Robot {robot.id} is not assigned to a farm; farm_id is required")
    farm = store.require(Kind.FARMS, farm_id)

    sensor_type = payload.get("sensor_type")
    timestamp = payload.get("timestamp") or utcnow()
    reading = store.insert(Kind.SENSOR_READINGS, {
        "farm_id": farm.id,
        "farm_name": farm.name,
        "robot_id": robot.id,
        "robot_name": robot.name,
        "sensor_type": sensor_type,
        "value": payload.get("value"),
        "unit": payload.get("unit") or DEFAULT_UNITS.get(sensor_type, ""),
        "timestamp": timestamp,
    })

    if reading.timestamp > robot.last_active or robot.connectivity != "online":
        store.update(Kind.ROBOTS, robot.id, {
            "last_active": max(reading.timestamp, robot.last_active),
            "connectivity": "online",
        })
    return reading


def record_reading(store: Store, payload: dict) -> SensorReading:
    """Store one reading; the robot must exist and resolve to a farm."""
    with store.transaction():
        return _ingest(store, payload)


def record_readings(store: Store, payloads: list[dict]) -> list[SensorReading]:
    """Store a batch in one transaction, skipping readings from unknown robots."""
    created = []
    with store.transaction():
        for payload in payloads:
            robot_id = payload.get("robot_id")
            if not robot_id or store.get_by_id(Kind.ROBOTS, robot_id) is None:
                log.warning("Skipping reading from unknown robot %s.", robot_id)
                continue
            created.append(_ingest(store, payload))
    return created
