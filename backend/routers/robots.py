"""
routers/robots.py - Robot CRUD and bulk engineer assignment.
"""

from fastapi import APIRouter, Depends, Query

from dependencies import get_maintainer, get_store, simulate_latency
from schemas import AssignEngineerRequest, Robot, RobotCreate, RobotUpdate
from services import queries
from services.errors import NotFound
from services.relationships import RelationshipMaintainer
from services.store import Store

router = APIRouter(dependencies=[Depends(simulate_latency)])


@router.get("", response_model=list[Robot])
def list_robots(
    farm_id: str | None = Query(None, alias="farmId"),
    engineer_id: str | None = Query(None, alias="engineerId"),
    q: str | None = None,
    store: Store = Depends(get_store),
):
    robots = queries.search_robots(store, q) if q else queries.list_robots(store)
    if farm_id is not None:
        robots = [robot for robot in robots if robot.farm_id == farm_id]
    if engineer_id is not None:
        robots = [robot for robot in robots if robot.engineer_id == engineer_id]
    return robots


@router.post("/assign", response_model=list[Robot])
def assign_to_engineer(
    body: AssignEngineerRequest, maintainer: RelationshipMaintainer = Depends(get_maintainer)
):
    return maintainer.assign_to_engineer(body.robot_ids, body.engineer_id)


@router.get("/{robot_id}", response_model=Robot)
def get_robot(robot_id: str, store: Store = Depends(get_store)):
    robot = queries.get_robot(store, robot_id)
    if robot is None:
        raise NotFound(f"Robot {robot_id} not found")
    return robot


@router.post("", response_model=Robot, status_code=201)
def create_robot(body: RobotCreate, maintainer: RelationshipMaintainer = Depends(get_maintainer)):
    return maintainer.create_robot(body.model_dump(exclude_unset=True))


@router.patch("/{robot_id}", response_model=Robot)
def update_robot(
    robot_id: str, body: RobotUpdate, maintainer: RelationshipMaintainer = Depends(get_maintainer)
):
    return maintainer.update_robot(robot_id, body.model_dump(exclude_unset=True))


@router.delete("/{robot_id}", response_model=Robot)
def delete_robot(robot_id: str, maintainer: RelationshipMaintainer = Depends(get_maintainer)):
    return maintainer.delete_robot(robot_id)
