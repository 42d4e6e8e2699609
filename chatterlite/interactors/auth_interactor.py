# chatterlite/interactors/auth_interactor.py
import inspect
import logging
from collections.abc import Callable
from typing import Any, Literal, Optional

from chatterlite.domain.entities import Session, User, new_id, utcnow
from chatterlite.domain.errors import AuthenticationError, ValidationError
from chatterlite.domain.events import UserChanged, row_record
from chatterlite.gateways.interfaces import IDataStore
from chatterlite.infrastructure import schemas
from chatterlite.infrastructure.event_dispatcher import EventDispatcher
from chatterlite.infrastructure.security import SecurityService

AuthEvent = Literal["SIGNED_IN", "SIGNED_OUT"]
AuthListener = Callable[[AuthEvent, Optional[schemas.SessionResponse]], Any]


class AuthStateNotifier:
    """Application-wide listeners for sign-in and sign-out."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.listeners: list[AuthListener] = []
        self.logger = logger or logging.getLogger("ChatterLite")

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        self.listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe

    async def notify(self, event: AuthEvent, session: Optional[schemas.SessionResponse]) -> None:
        for listener in list(self.listeners):
            try:
                result = listener(event, session)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                self.logger.exception(f"Auth state listener failed on {event}")


class AuthInteractor:
    def __init__(
        self,
        store: IDataStore,
        security_service: SecurityService,
        event_dispatcher: EventDispatcher,
        notifier: AuthStateNotifier,
    ):
        self.store = store
        self.security_service = security_service
        self.event_dispatcher = event_dispatcher
        self.notifier = notifier

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        return self.notifier.subscribe(listener)

    async def sign_up(self, payload: schemas.SignUpRequest) -> schemas.SessionResponse:
        self.security_service.ensure_configured()
        email = (payload.email or "").strip().lower()
        full_name = (payload.full_name or "").strip()
        if not email or not payload.password or not full_name:
            raise ValidationError("Email, password, and full name are required")

        if await self.store.users.get_by_email(email):
            raise ValidationError(
                "An account with this email already exists. Please sign in instead."
            )

        user = await self.store.users.create_user(
            User(
                id=new_id(),
                email=email,
                full_name=full_name,
                hashed_password=self.security_service.get_password_hash(payload.password),
            )
        )
        return await self._start_session(user)

    async def sign_in(self, payload: schemas.SignInRequest) -> schemas.SessionResponse:
        self.security_service.ensure_configured()
        email = (payload.email or "").strip().lower()
        if not email or not payload.password:
            raise ValidationError("Email and password are required")

        user = await self.store.users.get_by_email(email)
        if (
            not user
            or not user.hashed_password
            or not self.security_service.verify_password(payload.password, user.hashed_password)
        ):
            raise AuthenticationError("Invalid login credentials")
        return await self._start_session(user)

    async def sign_out(self, access_token: Optional[str]) -> None:
        """End the session behind ``access_token``; never fails."""
        if access_token and self.security_service.config.auth_configured:
            session = await self.store.sessions.get_by_access_token(access_token)
            if session:
                await self.store.sessions.delete_by_access_token(access_token)
                await self._set_presence(session.user_id, False)
        await self.notifier.notify("SIGNED_OUT", None)

    async def get_current_user(self, access_token: str) -> schemas.User:
        user, _ = await self._resolve(access_token)
        return schemas.User.model_validate(user)

    async def get_session(self, access_token: str) -> schemas.SessionResponse:
        user, session = await self._resolve(access_token)
        return self._to_response(session, user)

    async def refresh(self, refresh_token: str) -> schemas.SessionResponse:
        user_id = self.security_service.decode_refresh_token(refresh_token)
        session = await self.store.sessions.get_by_refresh_token(refresh_token)
        if not user_id or not session or session.user_id != user_id:
            raise AuthenticationError("Invalid refresh token")
        user = await self.store.users.get_user(user_id)
        if not user:
            raise AuthenticationError("User not found")
        await self.store.sessions.delete_by_refresh_token(refresh_token)
        return await self._start_session(user)

    async def _resolve(self, access_token: str) -> tuple[User, Session]:
        user_id = self.security_service.decode_access_token(access_token)
        if user_id is None:
            raise AuthenticationError("Could not validate credentials")
        session = await self.store.sessions.get_by_access_token(access_token)
        user = await self.store.users.get_user(user_id)
        if session is None or user is None or session.user_id != user.id:
            raise AuthenticationError("Invalid or expired token")
        return user, session

    async def _start_session(self, user: User) -> schemas.SessionResponse:
        access_token, expires_at = self.security_service.create_access_token(
            data={"sub": user.id}
        )
        refresh_token, _ = self.security_service.create_refresh_token(data={"sub": user.id})
        session = await self.store.sessions.create_session(
            Session(
                id=new_id(),
                user_id=user.id,
                access_token=access_token,
                refresh_token=refresh_token,
                token_type="bearer",
                expires_at=expires_at,
            )
        )
        user = await self._set_presence(user.id, True) or user
        response = self._to_response(session, user)
        await self.notifier.notify("SIGNED_IN", response)
        return response

    async def _set_presence(self, user_id: str, is_online: bool) -> Optional[User]:
        user = await self.store.users.update_user(
            user_id, {"is_online": is_online, "last_seen": utcnow()}
        )
        await self.store.commit()
        if user:
            await self.event_dispatcher.dispatch(
                UserChanged(event="UPDATE", record=row_record(user))
            )
        return user

    @staticmethod
    def _to_response(session: Session, user: User) -> schemas.SessionResponse:
        return schemas.SessionResponse(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            token_type=session.token_type,
            expires_at=session.expires_at,
            user=schemas.User.model_validate(user),
        )
