# chatterlite/infrastructure/event_handlers.py
import json

from chatterlite.domain.events import RowChanged


class EventHandlers:
    """Mirrors committed row changes onto Redis pub/sub for external listeners."""

    def __init__(self, redis_client):
        self.redis_client = redis_client

    async def publish_row_changed(self, event: RowChanged):
        payload = json.dumps(
            {"table": event.table, "event": event.event, "record": event.record},
            default=str,
        )
        await self.redis_client.publish(f"table:{event.table}", payload)

        chat_id = event.record.get("chat_id")
        if chat_id:
            await self.redis_client.publish(f"chat:{chat_id}", payload)
