"""
routers/dashboard.py - Aggregates behind the admin dashboard charts.
"""

from fastapi import APIRouter, Depends

from dependencies import get_store, simulate_dashboard_latency
from schemas import ChartPoint, DashboardStats, SensorTypeSummary
from services import aggregation, queries
from services.errors import NotFound
from services.store import Store

router = APIRouter(dependencies=[Depends(simulate_dashboard_latency)])


@router.get("/stats", response_model=DashboardStats)
def get_stats(store: Store = Depends(get_store)):
    return aggregation.dashboard_stats(store)


@router.get("/robot-distribution", response_model=list[ChartPoint])
def get_robot_distribution_by_farm(store: Store = Depends(get_store)):
    return aggregation.robot_distribution_by_farm(store)


@router.get("/robot-status", response_model=list[ChartPoint])
def get_robot_status_overview(store: Store = Depends(get_store)):
    return aggregation.robot_status_overview(store)


@router.get("/farm-status", response_model=list[ChartPoint])
def get_farm_status_distribution(store: Store = Depends(get_store)):
    return aggregation.farm_status_distribution(store)


@router.get("/farms/{farm_id}/sensor-summary", response_model=list[SensorTypeSummary])
def get_sensor_summary(farm_id: str, store: Store = Depends(get_store)):
    """Per-sensor statistics for one farm's readings."""
    if queries.get_farm(store, farm_id) is None:
        raise NotFound(f"Farm {farm_id} not found")
    return aggregation.sensor_summary(store, farm_id)
