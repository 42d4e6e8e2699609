# chatterlite/sync/chat_list.py
import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import List, Optional

from chatterlite.domain.events import RowChanged
from chatterlite.infrastructure import schemas
from chatterlite.infrastructure.change_feed import ChangeFeed, Subscription
from chatterlite.infrastructure.event_dispatcher import EventDispatcher
from chatterlite.infrastructure.store import StoreProvider
from chatterlite.interactors.chat_interactor import ChatInteractor

ChatListCallback = Callable[[List[schemas.ChatSummary]], Awaitable[None]]


class ChatListSynchronizer:
    """Keeps one user's chat list current.

    Any change on messages, memberships or chats triggers a full refetch.
    Refreshes run one at a time; a failed refresh is logged and the
    previous list stays in place.
    """

    WATCHED_TABLES = ("messages", "chat_members", "chats")

    def __init__(
        self,
        provider: StoreProvider,
        change_feed: ChangeFeed,
        event_dispatcher: EventDispatcher,
        user_id: str,
        logger: logging.Logger,
        on_update: Optional[ChatListCallback] = None,
    ):
        self.provider = provider
        self.change_feed = change_feed
        self.event_dispatcher = event_dispatcher
        self.user_id = user_id
        self.logger = logger
        self.on_update = on_update
        self.chats: List[schemas.ChatSummary] = []
        self._subscriptions: List[Subscription] = []
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return bool(self._subscriptions)

    async def start(self) -> List[schemas.ChatSummary]:
        if not self._subscriptions:
            self._subscriptions = [
                self.change_feed.subscribe(table, self._on_change)
                for table in self.WATCHED_TABLES
            ]
        return await self.refresh()

    async def _on_change(self, change: RowChanged) -> None:
        await self.refresh()

    async def refresh(self) -> List[schemas.ChatSummary]:
        async with self._lock:
            try:
                async with self.provider.session() as store:
                    chats = await ChatInteractor(store, self.event_dispatcher).get_chat_summaries(
                        self.user_id
                    )
            except Exception:
                self.logger.exception(f"Chat list refresh failed for user {self.user_id}")
                return self.chats

            self.chats = chats
            if self.on_update:
                await self.on_update(chats)
            return chats

    def stop(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []

    async def __aenter__(self) -> "ChatListSynchronizer":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.stop()
