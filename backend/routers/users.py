"""
routers/users.py - User CRUD and engineer approval endpoints.
"""

from fastapi import APIRouter, Depends

from dependencies import get_maintainer, get_store, simulate_latency
from schemas import Role, User, UserCreate, UserStatus, UserUpdate
from services import queries
from services.errors import NotFound
from services.relationships import RelationshipMaintainer
from services.store import Store

router = APIRouter(dependencies=[Depends(simulate_latency)])


@router.get("", response_model=list[User])
def list_users(
    role: Role | None = None,
    status: UserStatus | None = None,
    store: Store = Depends(get_store),
):
    users = queries.list_users(store)
    if role is not None:
        users = [user for user in users if user.role == role]
    if status is not None:
        users = [user for user in users if user.status == status]
    return users


@router.get("/pending", response_model=list[User])
def list_pending_engineers(store: Store = Depends(get_store)):
    return queries.pending_engineers(store)


@router.get("/engineers/assignable", response_model=list[User])
def list_assignable_engineers(store: Store = Depends(get_store)):
    return queries.assignable_engineers(store)


@router.get("/{user_id}", response_model=User)
def get_user(user_id: str, store: Store = Depends(get_store)):
    user = queries.get_user(store, user_id)
    if user is None:
        raise NotFound(f"User {user_id} not found")
    return user


@router.post("", response_model=User, status_code=201)
def create_user(body: UserCreate, maintainer: RelationshipMaintainer = Depends(get_maintainer)):
    return maintainer.create_user(body.model_dump(exclude_unset=True))


@router.patch("/{user_id}", response_model=User)
def update_user(
    user_id: str, body: UserUpdate, maintainer: RelationshipMaintainer = Depends(get_maintainer)
):
    return maintainer.update_user(user_id, body.model_dump(exclude_unset=True))


@router.delete("/{user_id}", response_model=User)
def delete_user(user_id: str, maintainer: RelationshipMaintainer = Depends(get_maintainer)):
    return maintainer.delete_user(user_id)


@router.post("/{user_id}/approve", response_model=User)
def approve_engineer(user_id: str, maintainer: RelationshipMaintainer = Depends(get_maintainer)):
    return maintainer.approve_engineer(user_id)


@router.post("/{user_id}/reject", response_model=User)
def reject_engineer(user_id: str, maintainer: RelationshipMaintainer = Depends(get_maintainer)):
    return maintainer.reject_engineer(user_id)
