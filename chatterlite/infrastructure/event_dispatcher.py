# chatterlite/infrastructure/event_dispatcher.py
import logging
from collections import defaultdict
from collections.abc import Callable

from chatterlite.domain.events import Event


class EventDispatcher:
    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.handlers: dict[str, list[Callable]] = defaultdict(list)
        self.logger = logger or logging.getLogger("ChatterLite")

    def register(self, event_type: str, handler: Callable) -> None:
        self.handlers[event_type].append(handler)

    async def dispatch(self, event: Event) -> None:
        # dispatched after commit; handler failures are only logged
        event_type = event.__class__.__name__
        for handler in self.handlers[event_type]:
            try:
                await handler(event)
            except Exception:
                self.logger.exception(f"Handler for {event_type} failed")
