# chatterlite/sync/message_stream.py
import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import List, Optional

from chatterlite.domain.errors import NotFoundError, ValidationError
from chatterlite.domain.events import RowChanged
from chatterlite.infrastructure import schemas
from chatterlite.infrastructure.change_feed import ChangeFeed, Subscription
from chatterlite.infrastructure.event_dispatcher import EventDispatcher
from chatterlite.infrastructure.storage import ObjectStorage
from chatterlite.infrastructure.store import StoreProvider
from chatterlite.interactors.message_interactor import MessageInteractor

MessageListCallback = Callable[[List[schemas.Message]], Awaitable[None]]


class MessageStream:
    """Message history of the selected chat, refetched on inserts and updates in that chat."""

    def __init__(
        self,
        provider: StoreProvider,
        change_feed: ChangeFeed,
        event_dispatcher: EventDispatcher,
        storage: ObjectStorage,
        user_id: str,
        logger: logging.Logger,
        on_update: Optional[MessageListCallback] = None,
    ):
        self.provider = provider
        self.change_feed = change_feed
        self.event_dispatcher = event_dispatcher
        self.storage = storage
        self.user_id = user_id
        self.logger = logger
        self.on_update = on_update
        self.chat_id: Optional[str] = None
        self.messages: List[schemas.Message] = []
        self._subscription: Optional[Subscription] = None
        self._lock = asyncio.Lock()

    def _interactor(self, store) -> MessageInteractor:
        return MessageInteractor(store, self.storage, self.event_dispatcher)

    def _require_chat(self) -> str:
        if not self.chat_id:
            raise ValidationError("No chat selected")
        return self.chat_id

    async def select_chat(self, chat_id: str) -> List[schemas.Message]:
        self.stop()
        self.chat_id = chat_id
        self.messages = []
        self._subscription = self.change_feed.subscribe(
            "messages",
            self._on_change,
            events=("INSERT", "UPDATE"),
            filter=("chat_id", chat_id),
        )
        return await self.refresh()

    async def _on_change(self, change: RowChanged) -> None:
        await self.refresh()

    async def refresh(self) -> List[schemas.Message]:
        async with self._lock:
            chat_id = self.chat_id
            if not chat_id:
                return []
            try:
                async with self.provider.session() as store:
                    messages = await self._interactor(store).list_messages(chat_id)
            except Exception:
                self.logger.exception(f"Message refresh failed for chat {chat_id}")
                return self.messages

            # the selection may have moved on while fetching
            if chat_id != self.chat_id:
                return self.messages
            self.messages = messages
            if self.on_update:
                await self.on_update(messages)
            return messages

    async def send_message(self, text: Optional[str], reply_to_id: Optional[str] = None) -> None:
        chat_id = self._require_chat()
        async with self.provider.session() as store:
            await self._interactor(store).send_message(chat_id, self.user_id, text, reply_to_id)

    async def upload_attachment(
        self, filename: Optional[str], content_type: Optional[str], data: bytes
    ) -> str:
        chat_id = self._require_chat()
        async with self.provider.session() as store:
            return await self._interactor(store).upload_attachment(
                chat_id, self.user_id, filename, content_type, data
            )

    async def toggle_reaction(self, message_id: str, emoji: Optional[str]) -> bool:
        chat_id = self._require_chat()
        async with self.provider.session() as store:
            interactor = self._interactor(store)
            if await interactor.get_chat_id(message_id) != chat_id:
                raise NotFoundError("Message not found")
            reacted = await interactor.toggle_reaction(message_id, self.user_id, emoji)
        # reaction rows carry no chat id, so the list is refetched explicitly
        await self.refresh()
        return reacted

    def stop(self) -> None:
        if self._subscription:
            self._subscription.unsubscribe()
            self._subscription = None

    async def __aenter__(self) -> "MessageStream":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.stop()
