"""
services/heartbeat.py - Background task that marks robots offline
when they have not been active for more than ROBOT_OFFLINE_THRESHOLD_SECONDS.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from config import HEARTBEAT_INTERVAL_SECONDS, ROBOT_OFFLINE_THRESHOLD_SECONDS
from services.store import Kind, Store, utcnow

log = logging.getLogger(__name__)


def sweep_offline_robots(
    store: Store,
    now: datetime | None = None,
    threshold_seconds: int = ROBOT_OFFLINE_THRESHOLD_SECONDS,
) -> list[str]:
    """Mark stale online robots offline and return their ids."""
    cutoff = (now or utcnow()) - timedelta(seconds=threshold_seconds)
    marked_offline = []
    with store.transaction():
        for robot in store.find(Kind.ROBOTS, connectivity="online"):
            if robot.last_active < cutoff:
                store.update(Kind.ROBOTS, robot.id, {"connectivity": "offline"})
                marked_offline.append(robot.id)
    return marked_offline


async def heartbeat_monitor(
    get_store: Callable[[], Store],
    interval_seconds: int = HEARTBEAT_INTERVAL_SECONDS,
):
    """
    Runs forever as an asyncio background task.
    Every interval, robots still flagged online whose last_active is older
    than the threshold are flagged offline. Only connectivity changes; the
    robot's status and assignments are left alone.
    """
    log.info("Robot heartbeat monitor started.")
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            marked_offline = await asyncio.to_thread(sweep_offline_robots, get_store())
            if marked_offline:
                log.warning(
                    "Heartbeat: marked %d robot(s) offline: %s",
                    len(marked_offline),
                    marked_offline,
                )
            else:
                log.debug("Heartbeat: all robots reporting normally.")
        except Exception as exc:
            log.error("Heartbeat monitor error: %s", exc)
            # Keep looping through transient errors
