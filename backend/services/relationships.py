"""
services/relationships.py - Mutation rules across users, farms and robots.

Every write to those kinds goes through RelationshipMaintainer so that
denormalized names, derived robot counts and status cascades stay in step
with the id references. Each public method runs in a single store
transaction: a failure part-way leaves nothing applied.
"""

import logging
from collections.abc import Iterable

from schemas import Farm, Robot, User
from services.errors import PreconditionFailed, ValidationError
from services.store import Kind, Store

log = logging.getLogger(__name__)

# Owned by the maintainer; callers cannot set them
DERIVED_FIELDS = frozenset({"farm_name", "engineer_name", "farmer_name", "robot_count"})


def _writable(payload: dict) -> dict:
    return {
        key: value for key, value in payload.items()
        if key not in DERIVED_FIELDS and key != "id"
    }


def default_status(role: str | None) -> str:
    """Engineers start pending approval; admins and farmers start active."""
    return "pending_approval" if role == "engineer" else "active"


class RelationshipMaintainer:
    def __init__(self, store: Store):
        self.store = store

    # ── Users ────────────────────────────────────────────────────────────────

    def create_user(self, payload: dict) -> User:
        data = _writable(payload)
        if data.get("status") is None:
            data["status"] = default_status(data.get("role"))
        with self.store.transaction():
            self._check_unique_email(data.get("email"))
            user = self.store.insert(Kind.USERS, data)
        log.info("Created %s %s (%s).", user.role, user.id, user.status)
        return user

    def update_user(self, user_id: str, updates: dict) -> User:
        data = _writable(updates)
        with self.store.transaction():
            previous = self.store.require(Kind.USERS, user_id)
            if data.get("email") and data["email"].lower() != previous.email.lower():
                self._check_unique_email(data["email"])
            user = self.store.update(Kind.USERS, user_id, data)

            if user.display_name != previous.display_name:
                self._refresh_user_name(user)

            # Losing active engineer/farmer standing releases what the user held
            if "status" in data or "role" in data:
                if not (user.role == "engineer" and user.status == "active"):
                    self._unassign_engineer(user.id)
                if not (user.role == "farmer" and user.status == "active"):
                    self._deactivate_farms(user.id)
        return user

    def delete_user(self, user_id: str) -> User:
        with self.store.transaction():
            user = self.store.require(Kind.USERS, user_id)
            if user.role == "engineer":
                self._unassign_engineer(user.id)
            if user.role == "farmer":
                # farmer_id on the farms is left pointing at the deleted user
                self._deactivate_farms(user.id)
            deleted = self.store.remove(Kind.USERS, user_id)
        log.info("Deleted %s %s.", deleted.role, deleted.id)
        return deleted

    def approve_engineer(self, user_id: str) -> User:
        with self.store.transaction():
            self._require_engineer(user_id)
            return self.store.update(Kind.USERS, user_id, {"status": "active"})

    def reject_engineer(self, user_id: str) -> User:
        # No robot cascade here, unlike a general status update
        with self.store.transaction():
            self._require_engineer(user_id)
            return self.store.update(Kind.USERS, user_id, {"status": "rejected"})

    # ── Farms ────────────────────────────────────────────────────────────────

    def create_farm(self, payload: dict) -> Farm:
        data = _writable(payload)
        if data.get("farmer_id") is None:
            raise ValidationError("farmer_id is required")
        with self.store.transaction():
            farmer = self._resolve_farmer(data["farmer_id"])
            data["farmer_name"] = farmer.display_name
            data["robot_count"] = 0
            if farmer.status != "active":
                data["status"] = "inactive"
            farm = self.store.insert(Kind.FARMS, data)
        log.info("Created farm %s for farmer %s.", farm.id, farm.farmer_id)
        return farm

    def update_farm(self, farm_id: str, updates: dict) -> Farm:
        data = _writable(updates)
        with self.store.transaction():
            previous = self.store.require(Kind.FARMS, farm_id)

            if "farmer_id" in data or "status" in data:
                if "farmer_id" in data:
                    if data["farmer_id"] is None:
                        raise ValidationError("farmer_id cannot be cleared")
                    owner = self._resolve_farmer(data["farmer_id"])
                    data["farmer_name"] = owner.display_name
                else:
                    owner = self.store.get_by_id(Kind.USERS, previous.farmer_id)
                owner_active = owner is not None and owner.role == "farmer" and owner.status == "active"
                if not owner_active:
                    data["status"] = "inactive"

            farm = self.store.update(Kind.FARMS, farm_id, data)
            if farm.name != previous.name:
                for robot in self.store.find(Kind.ROBOTS, farm_id=farm.id):
                    self.store.update(Kind.ROBOTS, robot.id, {"farm_name": farm.name})
        return farm

    def delete_farm(self, farm_id: str) -> Farm:
        with self.store.transaction():
            self.store.require(Kind.FARMS, farm_id)
            released = self.store.find(Kind.ROBOTS, farm_id=farm_id)
            for robot in released:
                self.store.update(Kind.ROBOTS, robot.id, {"farm_id": None, "farm_name": None})
            deleted = self.store.remove(Kind.FARMS, farm_id)
        log.info("Deleted farm %s, released %d robot(s).", farm_id, len(released))
        return deleted

    # ── Robots ───────────────────────────────────────────────────────────────

    def create_robot(self, payload: dict) -> Robot:
        data = _writable(payload)
        with self.store.transaction():
            self._resolve_assignments(data)
            robot = self.store.insert(Kind.ROBOTS, data)
            self._refresh_robot_counts([robot.farm_id])
        return robot

    def update_robot(self, robot_id: str, updates: dict) -> Robot:
        data = _writable(updates)
        with self.store.transaction():
            previous = self.store.require(Kind.ROBOTS, robot_id)
            self._resolve_assignments(data)
            robot = self.store.update(Kind.ROBOTS, robot_id, data)
            if robot.farm_id != previous.farm_id:
                self._refresh_robot_counts([previous.farm_id, robot.farm_id])
        return robot

    def delete_robot(self, robot_id: str) -> Robot:
        with self.store.transaction():
            robot = self.store.remove(Kind.ROBOTS, robot_id)
            self._refresh_robot_counts([robot.farm_id])
        return robot

    def assign_to_engineer(self, robot_ids: list[str], engineer_id: str) -> list[Robot]:
        """
        Assign every existing robot in ``robot_ids`` to one engineer.

        The engineer check gates the whole batch: nothing is touched unless the
        engineer exists and is active. Unknown robot ids are skipped. Returns
        the assigned robots in store order.
        """
        with self.store.transaction():
            engineer = self._assignable_engineer(engineer_id)
            wanted = set(robot_ids)
            for robot_id in dict.fromkeys(robot_ids):
                if self.store.get_by_id(Kind.ROBOTS, robot_id) is None:
                    continue
                self.store.update(Kind.ROBOTS, robot_id, {
                    "engineer_id": engineer.id,
                    "engineer_name": engineer.display_name,
                })
            assigned = [robot for robot in self.store.get_all(Kind.ROBOTS) if robot.id in wanted]
        log.info("Assigned %d robot(s) to engineer %s.", len(assigned), engineer.id)
        return assigned

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _check_unique_email(self, email: str | None) -> None:
        if not email:
            return
        for user in self.store.get_all(Kind.USERS):
            if user.email.lower() == email.lower():
                raise ValidationError(f"A user with email {email} already exists")

    def _resolve_farmer(self, farmer_id: str) -> User:
        farmer = self.store.require(Kind.USERS, farmer_id)
        if farmer.role != "farmer":
            raise ValidationError(f"User {farmer_id} is not a farmer")
        return farmer

    def _require_engineer(self, user_id: str) -> User:
        user = self.store.require(Kind.USERS, user_id)
        if user.role != "engineer":
            raise ValidationError(f"User {user_id} is not an engineer")
        return user

    def _assignable_engineer(self, engineer_id: str) -> User:
        engineer = self.store.get_by_id(Kind.USERS, engineer_id)
        if engineer is None or engineer.role != "engineer":
            raise PreconditionFailed(f"Engineer {engineer_id} not found")
        if engineer.status != "active":
            raise PreconditionFailed(f"Engineer {engineer_id} is not active ({engineer.status})")
        return engineer

    def _resolve_assignments(self, data: dict) -> None:
        """Fill in the name half of each assignment pair present in ``data``."""
        if "farm_id" in data:
            farm_id = data["farm_id"]
            data["farm_name"] = self.store.require(Kind.FARMS, farm_id).name if farm_id else None
        if "engineer_id" in data:
            engineer_id = data["engineer_id"]
            data["engineer_name"] = (
                self._assignable_engineer(engineer_id).display_name if engineer_id else None
            )

    def _unassign_engineer(self, user_id: str) -> None:
        robots = self.store.find(Kind.ROBOTS, engineer_id=user_id)
        for robot in robots:
            self.store.update(Kind.ROBOTS, robot.id, {"engineer_id": None, "engineer_name": None})
        if robots:
            log.info("Cascade: unassigned %d robot(s) from engineer %s.", len(robots), user_id)

    def _deactivate_farms(self, user_id: str) -> None:
        farms = [farm for farm in self.store.find(Kind.FARMS, farmer_id=user_id) if farm.status != "inactive"]
        for farm in farms:
            self.store.update(Kind.FARMS, farm.id, {"status": "inactive"})
        if farms:
            log.info("Cascade: marked %d farm(s) of farmer %s inactive.", len(farms), user_id)

    def _refresh_user_name(self, user: User) -> None:
        for robot in self.store.find(Kind.ROBOTS, engineer_id=user.id):
            self.store.update(Kind.ROBOTS, robot.id, {"engineer_name": user.display_name})
        for farm in self.store.find(Kind.FARMS, farmer_id=user.id):
            self.store.update(Kind.FARMS, farm.id, {"farmer_name": user.display_name})

    def _refresh_robot_counts(self, farm_ids: Iterable[str | None]) -> None:
        for farm_id in {farm_id for farm_id in farm_ids if farm_id}:
            farm = self.store.get_by_id(Kind.FARMS, farm_id)
            if farm is None:
                continue
            count = len(self.store.find(Kind.ROBOTS, farm_id=farm_id))
            if farm.robot_count != count:
                self.store.update(Kind.FARMS, farm_id, {"robot_count": count})
