# chatterlite/api/friend_requests.py
from typing import List

from fastapi import APIRouter, Depends

from chatterlite.api.dependencies import get_friend_request_interactor
from chatterlite.infrastructure import schemas
from chatterlite.interactors.friend_request_interactor import FriendRequestInteractor

router = APIRouter()


@router.post("", response_model=schemas.FriendRequest)
async def create_friend_request(
    payload: schemas.FriendRequestCreate,
    interactor: FriendRequestInteractor = Depends(get_friend_request_interactor),
):
    return await interactor.create(payload.sender_id, payload.receiver_id)


@router.get("/pending/{user_id}", response_model=List[schemas.FriendRequest])
async def read_pending_requests(
    user_id: str,
    interactor: FriendRequestInteractor = Depends(get_friend_request_interactor),
):
    return await interactor.list_pending(user_id)


@router.get("/{user_id}", response_model=List[schemas.FriendRequest])
async def read_friend_requests(
    user_id: str,
    interactor: FriendRequestInteractor = Depends(get_friend_request_interactor),
):
    return await interactor.list_for_user(user_id)


@router.patch("/{request_id}", response_model=schemas.FriendRequest)
async def update_friend_request(
    request_id: str,
    payload: schemas.FriendRequestUpdate,
    interactor: FriendRequestInteractor = Depends(get_friend_request_interactor),
):
    return await interactor.update_status(request_id, payload.status)
