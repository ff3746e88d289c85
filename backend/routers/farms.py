"""
routers/farms.py - Farm CRUD endpoints.
"""

from fastapi import APIRouter, Depends, Query

from dependencies import get_maintainer, get_store, simulate_latency
from schemas import Farm, FarmCreate, FarmUpdate
from services import queries
from services.errors import NotFound
from services.relationships import RelationshipMaintainer
from services.store import Store

router = APIRouter(dependencies=[Depends(simulate_latency)])


@router.get("", response_model=list[Farm])
def list_farms(
    farmer_id: str | None = Query(None, alias="farmerId"),
    store: Store = Depends(get_store),
):
    if farmer_id is not None:
        return queries.farms_by_farmer(store, farmer_id)
    return queries.list_farms(store)


@router.get("/{farm_id}", response_model=Farm)
def get_farm(farm_id: str, store: Store = Depends(get_store)):
    farm = queries.get_farm(store, farm_id)
    if farm is None:
        raise NotFound(f"Farm {farm_id} not found")
    return farm


@router.post("", response_model=Farm, status_code=201)
def create_farm(body: FarmCreate, maintainer: RelationshipMaintainer = Depends(get_maintainer)):
    return maintainer.create_farm(body.model_dump(exclude_unset=True))


@router.patch("/{farm_id}", response_model=Farm)
def update_farm(
    farm_id: str, body: FarmUpdate, maintainer: RelationshipMaintainer = Depends(get_maintainer)
):
    return maintainer.update_farm(farm_id, body.model_dump(exclude_unset=True))


@router.delete("/{farm_id}", response_model=Farm)
def delete_farm(farm_id: str, maintainer: RelationshipMaintainer = Depends(get_maintainer)):
    return maintainer.delete_farm(farm_id)
