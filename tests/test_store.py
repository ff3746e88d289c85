import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from conftest import user_payload
from database import create_tables
from services.errors import NotFound, ValidationError
from services.sql_store import SqlStore
from services.store import Kind


def test_insert_assigns_prefixed_sequential_ids(store):
    first = store.insert(Kind.USERS, {**user_payload(), "status": "active"})
    second = store.insert(Kind.USERS, {**user_payload(), "status": "active"})
    robot = store.insert(Kind.ROBOTS, {"name": "SoilScout"})

    assert (first.id, second.id) == ("u1", "u2")
    assert robot.id == "r1"


def test_ids_are_not_reused_after_removal(store):
    store.insert(Kind.ROBOTS, {"name": "A"})
    second = store.insert(Kind.ROBOTS, {"name": "B"})
    store.remove(Kind.ROBOTS, second.id)

    third = store.insert(Kind.ROBOTS, {"name": "C"})
    assert third.id == "r3"


def test_insert_stamps_creation_time_unless_caller_supplies_one(store):
    before = datetime.now(timezone.utc)
    stamped = store.insert(Kind.USERS, {**user_payload(), "status": "active"})
    assert stamped.created_at >= before.replace(microsecond=0)

    fixed = datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc)
    supplied = store.insert(Kind.USERS, {**user_payload(), "status": "active", "created_at": fixed})
    assert supplied.created_at == fixed


def test_insert_ignores_caller_id(store):
    robot = store.insert(Kind.ROBOTS, {"id": "custom", "name": "A"})
    assert robot.id == "r1"
    assert store.get_by_id(Kind.ROBOTS, "custom") is None


def test_insert_rejects_missing_required_field(store):
    with pytest.raises(ValidationError):
        store.insert(Kind.ROBOTS, {"status": "available"})
    # A rejected payload does not consume an id
    assert store.insert(Kind.ROBOTS, {"name": "A"}).id == "r1"


@pytest.mark.parametrize("field,value", [
    ("status", "broken"),
    ("connectivity", "satellite"),
    ("battery_level", 140),
])
def test_insert_rejects_values_outside_closed_sets(store, field, value):
    with pytest.raises(ValidationError):
        store.insert(Kind.ROBOTS, {"name": "A", field: value})


def test_robot_assignment_pairs_must_be_set_together(store):
    with pytest.raises(ValidationError):
        store.insert(Kind.ROBOTS, {"name": "A", "farm_id": "f1"})
    with pytest.raises(ValidationError):
        store.insert(Kind.ROBOTS, {"name": "A", "engineer_id": None, "engineer_name": "Ghost"})


def test_update_merges_only_supplied_fields(store):
    robot = store.insert(Kind.ROBOTS, {"name": "A", "battery_level": 40})
    updated = store.update(Kind.ROBOTS, robot.id, {"status": "maintenance"})

    assert updated.status == "maintenance"
    assert updated.model_dump(exclude={"status"}) == robot.model_dump(exclude={"status"})
    assert store.get_by_id(Kind.ROBOTS, robot.id) == updated


def test_update_validates_merged_record(store):
    robot = store.insert(Kind.ROBOTS, {"name": "A"})
    with pytest.raises(ValidationError):
        store.update(Kind.ROBOTS, robot.id, {"status": "flying"})
    assert store.get_by_id(Kind.ROBOTS, robot.id).status == "available"


def test_update_and_remove_unknown_id_raise_not_found(store):
    with pytest.raises(NotFound):
        store.update(Kind.FARMS, "f99", {"name": "Nowhere"})
    with pytest.raises(NotFound):
        store.remove(Kind.FARMS, "f99")


def test_remove_returns_pre_deletion_snapshot(store):
    robot = store.insert(Kind.ROBOTS, {"name": "A", "status": "in-use"})
    removed = store.remove(Kind.ROBOTS, robot.id)

    assert removed == robot
    assert store.get_by_id(Kind.ROBOTS, robot.id) is None


def test_get_all_preserves_insertion_order(store):
    names = ["Zeta", "Alpha", "Mid"]
    for name in names:
        store.insert(Kind.ROBOTS, {"name": name})
    store.update(Kind.ROBOTS, "r1", {"battery_level": 10})

    assert [robot.name for robot in store.get_all(Kind.ROBOTS)] == names


def test_farm_coordinates_round_trip(store):
    farm = store.insert(Kind.FARMS, {
        "name": "Atlas Orchard",
        "location": "Beni Mellal",
        "gps_coordinates": {"latitude": 32.3373, "longitude": -6.3498},
        "farmer_id": "u1",
        "farmer_name": "Fatima Berrada",
    })
    fetched = store.get_by_id(Kind.FARMS, farm.id)

    assert fetched.gps_coordinates.latitude == pytest.approx(32.3373)
    assert fetched.gps_coordinates.longitude == pytest.approx(-6.3498)
    assert fetched.status == "active"


def test_transaction_rolls_back_every_change_on_error(store):
    kept = store.insert(Kind.ROBOTS, {"name": "Kept"})

    with pytest.raises(NotFound):
        with store.transaction():
            store.insert(Kind.ROBOTS, {"name": "Discarded"})
            store.update(Kind.ROBOTS, kept.id, {"status": "maintenance"})
            store.remove(Kind.ROBOTS, "r404")

    assert store.get_all(Kind.ROBOTS) == [kept]
    assert store.insert(Kind.ROBOTS, {"name": "Next"}).id == "r2"


def test_nested_transaction_joins_outer(store):
    with pytest.raises(RuntimeError):
        with store.transaction():
            with store.transaction():
                store.insert(Kind.ROBOTS, {"name": "Inner"})
            raise RuntimeError("outer failure")

    assert store.get_all(Kind.ROBOTS) == []


# ── Concurrent requests ──────────────────────────────────────────────────────

@pytest.fixture
def file_sql_store(tmp_path):
    # Separate connections per session, unlike the shared in-memory database
    engine = create_engine(
        f"sqlite:///{tmp_path / 'farm.db'}",
        connect_args={"check_same_thread": False},
    )
    create_tables(engine)
    yield SqlStore(sessionmaker(engine, expire_on_commit=False))
    engine.dispose()


def test_sql_transaction_in_another_thread_gets_its_own_session(file_sql_store):
    store = file_sql_store
    with ThreadPoolExecutor(max_workers=1) as pool:
        with store.transaction():
            pending = store.insert(Kind.ROBOTS, {"name": "Uncommitted"})
            seen_elsewhere = pool.submit(store.get_all, Kind.ROBOTS).result(timeout=10)
            assert store.get_by_id(Kind.ROBOTS, pending.id) is not None
        committed = pool.submit(store.get_all, Kind.ROBOTS).result(timeout=10)

    assert seen_elsewhere == []
    assert [robot.id for robot in committed] == [pending.id]


def test_memory_rollback_does_not_undo_another_threads_write(memory_store):
    with ThreadPoolExecutor(max_workers=1) as pool:
        with pytest.raises(RuntimeError):
            with memory_store.transaction():
                memory_store.insert(Kind.ROBOTS, {"name": "Doomed"})
                other = pool.submit(memory_store.insert, Kind.ROBOTS, {"name": "Survivor"})
                time.sleep(0.05)
                assert not other.done()
                raise RuntimeError("abort")
        survivor = other.result(timeout=10)

    assert survivor.id == "r1"
    assert [robot.name for robot in memory_store.get_all(Kind.ROBOTS)] == ["Survivor"]
