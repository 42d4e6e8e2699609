# chatterlite/api/users.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from chatterlite.api.dependencies import get_current_user, get_user_interactor
from chatterlite.domain.errors import ForbiddenError
from chatterlite.infrastructure import schemas
from chatterlite.interactors.user_interactor import UserInteractor

router = APIRouter()


@router.post("/sync", response_model=schemas.User)
async def sync_user(
    payload: schemas.UserSync,
    user_interactor: UserInteractor = Depends(get_user_interactor),
):
    return await user_interactor.sync_user(payload)


@router.get("/search", response_model=List[schemas.User])
async def search_users(
    q: Optional[str] = Query(None, description="Substring of email or full name"),
    user_interactor: UserInteractor = Depends(get_user_interactor),
):
    return await user_interactor.search_users(q)


@router.get("/{user_id}", response_model=schemas.User)
async def read_user(
    user_id: str,
    user_interactor: UserInteractor = Depends(get_user_interactor),
):
    return await user_interactor.get_user(user_id)


@router.put("/{user_id}", response_model=schemas.User)
async def update_user(
    user_id: str,
    user_update: schemas.UserUpdate,
    user_interactor: UserInteractor = Depends(get_user_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    if current_user.id != user_id:
        raise ForbiddenError("You can only update your own profile")
    return await user_interactor.update_profile(user_id, user_update)
