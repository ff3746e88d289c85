"""
services/seed.py - Demo fleet for local development and dashboard demos.

Everything is created through RelationshipMaintainer, so names, robot counts
and cascades come out exactly as they would through the API.
"""

import logging
import random
from datetime import timedelta

from services.readings import record_readings
from services.relationships import RelationshipMaintainer
from services.store import Kind, Store, utcnow

log = logging.getLogger(__name__)

# ── Named profiles ────────────────────────────────────────────────────────────
DEMO_USERS = {
    "admin":     {"first_name": "Admin",  "last_name": "VisionSoil", "email": "admin@visionsoil.io",   "phone": "0600000001", "role": "admin"},
    "engineer":  {"first_name": "Youssef", "last_name": "Amrani",    "email": "youssef@visionsoil.io", "phone": "0600000002", "role": "engineer", "status": "active"},
    "engineer2": {"first_name": "Salma",  "last_name": "Bennani",    "email": "salma@visionsoil.io",   "phone": "0600000003", "role": "engineer", "status": "active"},
    "pending":   {"first_name": "Karim",  "last_name": "Idrissi",    "email": "karim@visionsoil.io",   "phone": "0600000004", "role": "engineer"},
    "rejected":  {"first_name": "Nadia",  "last_name": "Tazi",       "email": "nadia@visionsoil.io",   "phone": "0600000005", "role": "engineer", "status": "rejected"},
    "farmer":    {"first_name": "Hassan", "last_name": "Alaoui",     "email": "hassan@visionsoil.io",  "phone": "0600000006", "role": "farmer"},
    "farmer2":   {"first_name": "Fatima", "last_name": "Berrada",    "email": "fatima@visionsoil.io",  "phone": "0600000007", "role": "farmer"},
}

DEMO_FARMS = [
    {"name": "Green Valley",  "location": "Meknes",   "gps_coordinates": {"latitude": 33.8935, "longitude": -5.5473}, "owner": "farmer"},
    {"name": "Sunrise Fields", "location": "Agadir",  "gps_coordinates": {"latitude": 30.4278, "longitude": -9.5981}, "owner": "farmer"},
    {"name": "Atlas Orchard", "location": "Beni Mellal", "gps_coordinates": {"latitude": 32.3373, "longitude": -6.3498}, "owner": "farmer2"},
]

# (name, farm index or None, engineer key or None, status, battery)
DEMO_ROBOTS = [
    ("SoilScout-1",    0,    "engineer",  "in-use",      82),
    ("SoilScout-2",    0,    None,        "available",   95),
    ("AgriBot-X",      1,    "engineer2", "in-use",      64),
    ("CropScanner-Pro", None, None,       "maintenance", 23),
    ("FieldMapper",    2,    "engineer2", "available",   77),
]

# Baseline value and jitter per sensor type
SENSOR_PROFILES = {
    "temperature": (24.0, 4.0),
    "humidity":    (58.0, 10.0),
    "soil_ph":     (6.6, 0.4),
    "light":       (32000.0, 8000.0),
}


def seed_demo_data(store: Store, readings_per_robot: int = 6, rng: random.Random | None = None) -> bool:
    """Populate an empty store. Returns False when users already exist."""
    if store.count(Kind.USERS):
        log.info("Store already holds users; demo seed skipped.")
        return False

    rng = rng or random.Random(42)
    maintainer = RelationshipMaintainer(store)
    with store.transaction():
        users = {key: maintainer.create_user(profile) for key, profile in DEMO_USERS.items()}

        farms = []
        for profile in DEMO_FARMS:
            payload = {k: v for k, v in profile.items() if k != "owner"}
            payload["farmer_id"] = users[profile["owner"]].id
            farms.append(maintainer.create_farm(payload))

        robots = []
        for name, farm_index, engineer_key, status, battery in DEMO_ROBOTS:
            robots.append(maintainer.create_robot({
                "name": name,
                "farm_id": farms[farm_index].id if farm_index is not None else None,
                "engineer_id": users[engineer_key].id if engineer_key else None,
                "status": status,
                "battery_level": battery,
            }))

        now = utcnow()
        payloads = []
        for robot in robots:
            if robot.farm_id is None:
                continue
            for step in range(readings_per_robot):
                for sensor_type, (baseline, jitter) in SENSOR_PROFILES.items():
                    payloads.append({
                        "robot_id": robot.id,
                        "sensor_type": sensor_type,
                        "value": round(baseline + rng.uniform(-jitter, jitter), 2),
                        "timestamp": now - timedelta(hours=readings_per_robot - step),
                    })
        record_readings(store, payloads)

    log.info(
        "Seeded demo data: %d users, %d farms, %d robots, %d readings.",
        len(users), len(farms), len(robots), len(payloads),
    )
    return True
