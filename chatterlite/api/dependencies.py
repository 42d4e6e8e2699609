# chatterlite/api/dependencies.py
import logging
from typing import AsyncGenerator

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from chatterlite.gateways.interfaces import IDataStore
from chatterlite.infrastructure import schemas
from chatterlite.infrastructure.event_dispatcher import EventDispatcher
from chatterlite.infrastructure.security import SecurityService
from chatterlite.infrastructure.storage import ObjectStorage
from chatterlite.infrastructure.store import StoreProvider
from chatterlite.interactors.auth_interactor import AuthInteractor, AuthStateNotifier
from chatterlite.interactors.chat_interactor import ChatInteractor
from chatterlite.interactors.friend_request_interactor import FriendRequestInteractor
from chatterlite.interactors.message_interactor import MessageInteractor
from chatterlite.interactors.user_interactor import UserInteractor

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/signin")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/signin", auto_error=False)


def get_logger(request: Request) -> logging.Logger:
    return request.app.state.logger


def get_security_service(request: Request) -> SecurityService:
    return request.app.state.security_service


def get_event_dispatcher(request: Request) -> EventDispatcher:
    return request.app.state.event_dispatcher


def get_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage


def get_auth_notifier(request: Request) -> AuthStateNotifier:
    return request.app.state.auth_notifier


def get_store_provider(request: Request) -> StoreProvider:
    return request.app.state.store_provider


async def get_store(
    provider: StoreProvider = Depends(get_store_provider),
) -> AsyncGenerator[IDataStore, None]:
    async with provider.session() as store:
        yield store


async def get_user_interactor(
    store: IDataStore = Depends(get_store),
    event_dispatcher: EventDispatcher = Depends(get_event_dispatcher),
):
    return UserInteractor(store, event_dispatcher)


async def get_auth_interactor(
    store: IDataStore = Depends(get_store),
    security_service: SecurityService = Depends(get_security_service),
    event_dispatcher: EventDispatcher = Depends(get_event_dispatcher),
    notifier: AuthStateNotifier = Depends(get_auth_notifier),
):
    return AuthInteractor(store, security_service, event_dispatcher, notifier)


async def get_chat_interactor(
    store: IDataStore = Depends(get_store),
    event_dispatcher: EventDispatcher = Depends(get_event_dispatcher),
):
    return ChatInteractor(store, event_dispatcher)


async def get_message_interactor(
    store: IDataStore = Depends(get_store),
    storage: ObjectStorage = Depends(get_storage),
    event_dispatcher: EventDispatcher = Depends(get_event_dispatcher),
):
    return MessageInteractor(store, storage, event_dispatcher)


async def get_friend_request_interactor(
    store: IDataStore = Depends(get_store),
    event_dispatcher: EventDispatcher = Depends(get_event_dispatcher),
    logger: logging.Logger = Depends(get_logger),
):
    return FriendRequestInteractor(store, event_dispatcher, logger)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    auth_interactor: AuthInteractor = Depends(get_auth_interactor),
) -> schemas.User:
    return await auth_interactor.get_current_user(token)
