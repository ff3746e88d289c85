"""
config.py - Central configuration for the VisionSoil backend.
Environment-driven settings and fixed domain constants live here.
"""

import os

from dotenv import load_dotenv

# ── Paths ─────────────────────────────────────────────────────────────────────
BACKEND_DIR  = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(BACKEND_DIR)

load_dotenv(os.path.join(PROJECT_ROOT, ".env"))


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# ── Storage ───────────────────────────────────────────────────────────────────
STORE_BACKEND  = os.environ.get("STORE_BACKEND", "memory")    # memory / sql
DATABASE_URL   = os.environ.get("DATABASE_URL", "sqlite:///./visionsoil.db")
SEED_DEMO_DATA = _env_bool("SEED_DEMO_DATA")

# ── Transport ─────────────────────────────────────────────────────────────────
CORS_ORIGINS = os.environ.get(
    "CORS_ORIGINS", "http://localhost:5173,http://localhost:8080"
).split(",")
# Artificial delay added at the HTTP edge to mimic a remote API
SIMULATED_LATENCY_MS = int(os.environ.get("SIMULATED_LATENCY_MS", "0"))
DASHBOARD_LATENCY_MS = int(os.environ.get("DASHBOARD_LATENCY_MS", "0"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# ── Robot heartbeat ───────────────────────────────────────────────────────────
ROBOT_OFFLINE_THRESHOLD_SECONDS = int(os.environ.get("ROBOT_OFFLINE_THRESHOLD_SECONDS", "120"))
HEARTBEAT_INTERVAL_SECONDS      = int(os.environ.get("HEARTBEAT_INTERVAL_SECONDS", "60"))  # 0 disables

# ── Identity ──────────────────────────────────────────────────────────────────
ID_PREFIXES = {
    "users":           "u",
    "farms":           "f",
    "robots":          "r",
    "sensor_readings": "s",
}

# ── Sensors ───────────────────────────────────────────────────────────────────
DEFAULT_UNITS = {
    "temperature": "°C",
    "humidity":    "%",
    "soil_ph":     "pH",
    "light":       "lux",
}
