# chatterlite/infrastructure/change_feed.py
import asyncio
import inspect
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from chatterlite.domain.events import ChangeType, RowChanged

ChangeCallback = Callable[[RowChanged], Any]


@dataclass(eq=False)
class Subscription:
    feed: "ChangeFeed"
    table: str
    callback: ChangeCallback
    events: frozenset[str]
    filter: tuple[str, Any] | None = None
    active: bool = field(default=True)

    def accepts(self, change: RowChanged) -> bool:
        if not self.active or change.table != self.table:
            return False
        if change.event not in self.events:
            return False
        if self.filter is not None:
            column, value = self.filter
            return change.matches(column, value)
        return True

    def unsubscribe(self) -> None:
        self.feed.remove(self)


class ChangeFeed:
    """In-process change-notification bus.

    Subscribers register per table, optionally narrowed to some change types
    and to rows whose ``column`` equals a value. Callbacks run as separate
    tasks so a publisher never waits on subscriber refetches; ``drain()``
    waits for everything scheduled so far.
    """

    ALL_EVENTS: frozenset[str] = frozenset({"INSERT", "UPDATE", "DELETE"})

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("ChatterLite")
        self._subscriptions: list[Subscription] = []
        self._tasks: set[asyncio.Task] = set()

    def subscribe(
        self,
        table: str,
        callback: ChangeCallback,
        events: Iterable[ChangeType] | None = None,
        filter: tuple[str, Any] | None = None,
    ) -> Subscription:
        subscription = Subscription(
            feed=self,
            table=table,
            callback=callback,
            events=frozenset(events) if events else self.ALL_EVENTS,
            filter=filter,
        )
        self._subscriptions.append(subscription)
        return subscription

    def remove(self, subscription: Subscription) -> None:
        subscription.active = False
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    async def publish(self, change: RowChanged) -> None:
        for subscription in list(self._subscriptions):
            if subscription.accepts(change):
                task = asyncio.create_task(self._deliver(subscription, change))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)

    async def _deliver(self, subscription: Subscription, change: RowChanged) -> None:
        # the subscriber may have gone away while the task was queued
        if not subscription.active:
            return
        try:
            result = subscription.callback(change)
            if inspect.isawaitable(result):
                await result
        except Exception:
            self.logger.exception(f"Change callback for {subscription.table} failed")

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
