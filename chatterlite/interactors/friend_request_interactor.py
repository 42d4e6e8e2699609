# chatterlite/interactors/friend_request_interactor.py
import logging
from typing import List, Optional

from chatterlite.domain.entities import Chat, FriendRequest, FriendRequestStatus, new_id
from chatterlite.domain.errors import NotFoundError, ValidationError
from chatterlite.domain.events import (
    ChatChanged,
    ChatMemberChanged,
    FriendRequestChanged,
    row_record,
)
from chatterlite.gateways.interfaces import IDataStore
from chatterlite.infrastructure import schemas
from chatterlite.infrastructure.event_dispatcher import EventDispatcher

ALLOWED_STATUSES = (FriendRequestStatus.ACCEPTED, FriendRequestStatus.REJECTED)


class FriendRequestInteractor:
    """pending -> accepted | rejected.

    Accepting commits the status first and only then makes sure a direct
    chat exists between the two users. That second step is best-effort and
    idempotent: an existing direct chat of the pair is reused, and a failure
    is logged without touching the accepted status.
    """

    def __init__(
        self,
        store: IDataStore,
        event_dispatcher: EventDispatcher,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.event_dispatcher = event_dispatcher
        self.logger = logger or logging.getLogger("ChatterLite")

    async def create(
        self, sender_id: Optional[str], receiver_id: Optional[str]
    ) -> schemas.FriendRequest:
        if not sender_id or not receiver_id:
            raise ValidationError("Sender and receiver IDs are required")
        if sender_id == receiver_id:
            raise ValidationError("Cannot send a friend request to yourself")

        existing = await self.store.friend_requests.get_by_pair(sender_id, receiver_id)
        if existing:
            return schemas.FriendRequest.model_validate(existing)

        request = await self.store.friend_requests.create(
            FriendRequest(id=new_id(), sender_id=sender_id, receiver_id=receiver_id)
        )
        await self.store.commit()
        await self.event_dispatcher.dispatch(
            FriendRequestChanged(event="INSERT", record=row_record(request))
        )
        return schemas.FriendRequest.model_validate(request)

    async def list_for_user(self, user_id: str) -> List[schemas.FriendRequest]:
        requests = await self.store.friend_requests.list_for_user(user_id)
        return [schemas.FriendRequest.model_validate(r) for r in requests]

    async def list_pending(self, user_id: str) -> List[schemas.FriendRequest]:
        requests = await self.store.friend_requests.list_pending(user_id)
        return [schemas.FriendRequest.model_validate(r) for r in requests]

    async def update_status(
        self, request_id: str, status: Optional[str]
    ) -> schemas.FriendRequest:
        if status not in ALLOWED_STATUSES:
            raise ValidationError("Status must be 'accepted' or 'rejected'")
        new_status = FriendRequestStatus(status)

        request = await self.store.friend_requests.get(request_id)
        if not request:
            raise NotFoundError("Friend request not found")

        if request.status != FriendRequestStatus.PENDING and request.status != new_status:
            raise ValidationError(f"Friend request has already been {request.status}")

        if request.status == FriendRequestStatus.PENDING:
            request = await self.store.friend_requests.update_status(request_id, new_status)
            await self.store.commit()
            await self.event_dispatcher.dispatch(
                FriendRequestChanged(event="UPDATE", record=row_record(request))
            )

        if new_status == FriendRequestStatus.ACCEPTED:
            await self.ensure_direct_chat(request)
        return schemas.FriendRequest.model_validate(request)

    async def ensure_direct_chat(self, request: FriendRequest) -> Optional[Chat]:
        """Return the direct chat of the request's pair, creating it if needed.

        Returns None when creation failed; the error is logged.
        """
        try:
            chat = await self.store.chats.find_direct_chat(request.sender_id, request.receiver_id)
            if chat:
                return chat
            chat = await self.store.chats.create_chat(
                Chat(id=new_id(), is_group=False, created_by=request.receiver_id)
            )
            members = [
                await self.store.chats.add_member(chat.id, request.sender_id),
                await self.store.chats.add_member(chat.id, request.receiver_id),
            ]
            await self.store.commit()
        except Exception:
            self.logger.exception(
                f"Failed to create chat for accepted friend request {request.id}"
            )
            await self.store.rollback()
            return None

        await self.event_dispatcher.dispatch(ChatChanged(event="INSERT", record=row_record(chat)))
        for member in members:
            await self.event_dispatcher.dispatch(
                ChatMemberChanged(event="INSERT", record=row_record(member))
            )
        self.logger.info(f"Created direct chat {chat.id} for friend request {request.id}")
        return chat
