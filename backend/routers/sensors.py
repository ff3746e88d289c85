"""
routers/sensors.py - Sensor data browsing and ingestion.
"""

from fastapi import APIRouter, Depends, Query

from dependencies import get_store, simulate_latency
from schemas import SensorReading, SensorReadingCreate, SensorType
from services import queries
from services.errors import ValidationError
from services.readings import record_reading, record_readings
from services.store import Store

router = APIRouter(dependencies=[Depends(simulate_latency)])


@router.get("", response_model=list[SensorReading])
def list_sensor_data(
    farm_id: str | None = Query(None, alias="farmId"),
    robot_id: str | None = Query(None, alias="robotId"),
    sensor_type: SensorType | None = Query(None, alias="sensorType"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    store: Store = Depends(get_store),
):
    """Readings matching every filter given; the date range needs both bounds."""
    if (start_date is None) != (end_date is None):
        raise ValidationError("startDate and endDate must be given together")
    if start_date is not None:
        readings = queries.readings_by_date_range(store, start_date, end_date)
    else:
        readings = queries.list_readings(store)
    if farm_id is not None:
        readings = [reading for reading in readings if reading.farm_id == farm_id]
    if robot_id is not None:
        readings = [reading for reading in readings if reading.robot_id == robot_id]
    if sensor_type is not None:
        readings = [reading for reading in readings if reading.sensor_type == sensor_type]
    return readings


@router.post("", response_model=SensorReading, status_code=201)
def create_sensor_reading(body: SensorReadingCreate, store: Store = Depends(get_store)):
    return record_reading(store, body.model_dump(exclude_unset=True))


@router.post("/bulk", response_model=list[SensorReading], status_code=201)
def create_bulk_readings(readings: list[SensorReadingCreate], store: Store = Depends(get_store)):
    if not readings:
        return []
    return record_readings(store, [r.model_dump(exclude_unset=True) for r in readings])
