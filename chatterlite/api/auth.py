# chatterlite/api/auth.py
from typing import Optional

from fastapi import APIRouter, Depends

from chatterlite.api.dependencies import get_auth_interactor, oauth2_scheme, optional_oauth2_scheme
from chatterlite.infrastructure import schemas
from chatterlite.interactors.auth_interactor import AuthInteractor

router = APIRouter()


@router.post("/signup", response_model=schemas.SessionResponse)
async def sign_up(
    payload: schemas.SignUpRequest,
    auth_interactor: AuthInteractor = Depends(get_auth_interactor),
):
    return await auth_interactor.sign_up(payload)


@router.post("/signin", response_model=schemas.SessionResponse)
async def sign_in(
    payload: schemas.SignInRequest,
    auth_interactor: AuthInteractor = Depends(get_auth_interactor),
):
    return await auth_interactor.sign_in(payload)


@router.post("/signout", status_code=204)
async def sign_out(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    auth_interactor: AuthInteractor = Depends(get_auth_interactor),
):
    await auth_interactor.sign_out(token)


@router.post("/refresh", response_model=schemas.SessionResponse)
async def refresh_session(
    payload: schemas.RefreshTokenRequest,
    auth_interactor: AuthInteractor = Depends(get_auth_interactor),
):
    return await auth_interactor.refresh(payload.refresh_token)


@router.get("/session", response_model=schemas.SessionResponse)
async def read_session(
    token: str = Depends(oauth2_scheme),
    auth_interactor: AuthInteractor = Depends(get_auth_interactor),
):
    return await auth_interactor.get_session(token)
