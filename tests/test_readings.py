from datetime import datetime, timedelta, timezone

import pytest

from conftest import farm_payload
from services.errors import NotFound, ValidationError
from services.readings import record_reading, record_readings
from services.store import Kind, utcnow


@pytest.fixture
def deployed(maintainer, farmer):
    farm = maintainer.create_farm(farm_payload(farmer.id, "Green Valley"))
    robot = maintainer.create_robot({"name": "SoilScout-1", "farm_id": farm.id})
    return farm, robot


def test_reading_resolves_names_and_default_unit(store, deployed):
    farm, robot = deployed

    reading = record_reading(store, {"robot_id": robot.id, "sensor_type": "humidity", "value": 61.5})

    assert reading.id == "s1"
    assert (reading.farm_id, reading.farm_name) == (farm.id, "Green Valley")
    assert (reading.robot_id, reading.robot_name) == (robot.id, "SoilScout-1")
    assert reading.unit == "%"


def test_explicit_unit_and_farm_are_kept(maintainer, store, farmer, deployed):
    _, robot = deployed
    visiting = maintainer.create_farm(farm_payload(farmer.id, "Visiting"))

    reading = record_reading(store, {
        "robot_id": robot.id,
        "farm_id": visiting.id,
        "sensor_type": "light",
        "value": 800,
        "unit": "W/m2",
    })

    assert reading.farm_name == "Visiting"
    assert reading.unit == "W/m2"


def test_reading_requires_known_robot_and_a_farm(maintainer, store):
    with pytest.raises(NotFound):
        record_reading(store, {"robot_id": "r404", "sensor_type": "light", "value": 1})

    loose = maintainer.create_robot({"name": "Unassigned"})
    with pytest.raises(ValidationError):
        record_reading(store, {"robot_id": loose.id, "sensor_type": "light", "value": 1})


def test_reading_rejects_unknown_sensor_type(store, deployed):
    _, robot = deployed
    with pytest.raises(ValidationError):
        record_reading(store, {"robot_id": robot.id, "sensor_type": "pressure", "value": 1})
    assert store.get_all(Kind.SENSOR_READINGS) == []


def test_reading_marks_robot_online_and_active(store, deployed):
    _, robot = deployed
    store.update(Kind.ROBOTS, robot.id, {
        "connectivity": "offline",
        "last_active": datetime(2024, 1, 1, tzinfo=timezone.utc),
    })
    at = utcnow() - timedelta(seconds=5)

    record_reading(store, {"robot_id": robot.id, "sensor_type": "temperature", "value": 22, "timestamp": at})

    refreshed = store.get_by_id(Kind.ROBOTS, robot.id)
    assert refreshed.connectivity == "online"
    assert refreshed.last_active == at


def test_bulk_ingest_skips_unknown_robots(store, deployed):
    _, robot = deployed

    created = record_readings(store, [
        {"robot_id": robot.id, "sensor_type": "temperature", "value": 20},
        {"robot_id": "r404", "sensor_type": "temperature", "value": 99},
        {"robot_id": robot.id, "sensor_type": "soil_ph", "value": 6.8},
    ])

    assert [reading.sensor_type for reading in created] == ["temperature", "soil_ph"]
    assert len(store.get_all(Kind.SENSOR_READINGS)) == 2


def test_bulk_ingest_is_all_or_nothing_on_invalid_reading(store, deployed):
    _, robot = deployed

    with pytest.raises(ValidationError):
        record_readings(store, [
            {"robot_id": robot.id, "sensor_type": "temperature", "value": 20},
            {"robot_id": robot.id, "sensor_type": "temperature", "value": "warm"},
        ])

    assert store.get_all(Kind.SENSOR_READINGS) == []
