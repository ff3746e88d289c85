"""
main.py - FastAPI application entry point.

Builds the entity store at startup via lifespan context manager.
"""

import asyncio
import logging
import os
import sys

# Add backend to path
BACKEND_DIR = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, BACKEND_DIR)

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from services.errors import FarmError
from services.heartbeat import heartbeat_monitor
from services.seed import seed_demo_data
from services.store import InMemoryStore, Store

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("visionsoil")


def build_store() -> Store:
    if config.STORE_BACKEND == "sql":
        from database import create_tables
        from services.sql_store import SqlStore

        create_tables()
        log.info("Database tables created.")
        return SqlStore()
    if config.STORE_BACKEND != "memory":
        raise ValueError(f"Unknown STORE_BACKEND {config.STORE_BACKEND!r} (expected memory or sql)")
    return InMemoryStore()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: build the store and optionally fill it with the demo fleet
    app.state.store = await asyncio.to_thread(build_store)
    log.info("Entity store ready (%s backend).", config.STORE_BACKEND)
    if config.SEED_DEMO_DATA:
        await asyncio.to_thread(seed_demo_data, app.state.store)

    # Background task: marks robots offline if not active for too long
    heartbeat_task = None
    if config.HEARTBEAT_INTERVAL_SECONDS > 0:
        heartbeat_task = asyncio.create_task(heartbeat_monitor(lambda: app.state.store))

    yield

    # Shutdown: cancel the heartbeat task gracefully
    if heartbeat_task is not None:
        heartbeat_task.cancel()
        try:
            await heartbeat_task
        except asyncio.CancelledError:
            pass


app = FastAPI(title="VisionSoil Farm Monitoring API", lifespan=lifespan)

# CORS for the dashboard dev servers
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FarmError)
async def farm_error_handler(request: Request, exc: FarmError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Register routers
from routers import dashboard, farms, robots, sensors, users

app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(farms.router, prefix="/api/farms", tags=["Farms"])
app.include_router(robots.router, prefix="/api/robots", tags=["Robots"])
app.include_router(sensors.router, prefix="/api/sensor-data", tags=["Sensor Data"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "store": config.STORE_BACKEND}
