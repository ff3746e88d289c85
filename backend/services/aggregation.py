"""
services/aggregation.py - Dashboard statistics, recomputed from the store on every call.
"""

from collections import Counter

from schemas import ChartPoint, DashboardStats, RobotStatusDistribution, SensorTypeSummary
from services.store import Kind, Store

ROBOT_STATUS_LABELS = {
    "available":   "Available",
    "in-use":      "In Use",
    "maintenance": "Maintenance",
}
FARM_STATUS_LABELS = {
    "active":   "Active",
    "inactive": "Inactive",
}


def dashboard_stats(store: Store) -> DashboardStats:
    farms = store.get_all(Kind.FARMS)
    robots = store.get_all(Kind.ROBOTS)
    roles = Counter(user.role for user in store.get_all(Kind.USERS))
    statuses = Counter(robot.status for robot in robots)

    return DashboardStats(
        total_farms=len(farms),
        active_farms=sum(1 for farm in farms if farm.status == "active"),
        total_robots=len(robots),
        total_engineers=roles["engineer"],
        total_farmers=roles["farmer"],
        robot_status_distribution=RobotStatusDistribution(
            available=statuses["available"],
            in_use=statuses["in-use"],
            maintenance=statuses["maintenance"],
        ),
    )


def robot_distribution_by_farm(store: Store) -> list[ChartPoint]:
    """Robots per farm, counted from robot farm references, in farm insertion order."""
    per_farm = Counter(robot.farm_id for robot in store.get_all(Kind.ROBOTS) if robot.farm_id)
    return [
        ChartPoint(name=farm.name, value=per_farm[farm.id])
        for farm in store.get_all(Kind.FARMS)
    ]


def robot_status_overview(store: Store) -> list[ChartPoint]:
    statuses = Counter(robot.status for robot in store.get_all(Kind.ROBOTS))
    return [ChartPoint(name=label, value=statuses[status]) for status, label in ROBOT_STATUS_LABELS.items()]


def farm_status_distribution(store: Store) -> list[ChartPoint]:
    statuses = Counter(farm.status for farm in store.get_all(Kind.FARMS))
    return [ChartPoint(name=label, value=statuses[status]) for status, label in FARM_STATUS_LABELS.items()]


def sensor_summary(store: Store, farm_id: str) -> list[SensorTypeSummary]:
    """Per sensor type for one farm: count, min, max, mean and the latest reading."""
    by_type: dict[str, list] = {}
    for reading in store.find(Kind.SENSOR_READINGS, farm_id=farm_id):
        by_type.setdefault(reading.sensor_type, []).append(reading)

    summaries = []
    for sensor_type, readings in by_type.items():
        values = [reading.value for reading in readings]
        latest = max(readings, key=lambda reading: reading.timestamp)
        summaries.append(SensorTypeSummary(
            sensor_type=sensor_type,
            unit=latest.unit,
            count=len(values),
            minimum=min(values),
            maximum=max(values),
            average=round(sum(values) / len(values), 2),
            latest_value=latest.value,
            latest_timestamp=latest.timestamp,
        ))
    return summaries
