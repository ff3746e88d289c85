"""
dependencies.py - FastAPI dependencies shared by the routers.
"""

import asyncio

from fastapi import Depends, Request

from config import DASHBOARD_LATENCY_MS, SIMULATED_LATENCY_MS
from services.relationships import RelationshipMaintainer
from services.store import Store


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_maintainer(store: Store = Depends(get_store)) -> RelationshipMaintainer:
    return RelationshipMaintainer(store)


async def simulate_latency():
    if SIMULATED_LATENCY_MS > 0:
        await asyncio.sleep(SIMULATED_LATENCY_MS / 1000)


async def simulate_dashboard_latency():
    if DASHBOARD_LATENCY_MS > 0:
        await asyncio.sleep(DASHBOARD_LATENCY_MS / 1000)
