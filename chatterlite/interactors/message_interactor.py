# chatterlite/interactors/message_interactor.py
from dataclasses import asdict
from pathlib import PurePosixPath
from typing import List, Optional

from chatterlite.domain.entities import Message, MessageKind, Reaction, new_id, utcnow
from chatterlite.domain.errors import NotFoundError, ValidationError
from chatterlite.domain.events import MessageChanged, ReactionChanged, row_record
from chatterlite.domain.reactions import aggregate_reactions
from chatterlite.gateways.interfaces import IDataStore
from chatterlite.infrastructure import schemas
from chatterlite.infrastructure.event_dispatcher import EventDispatcher
from chatterlite.infrastructure.storage import ObjectStorage


class MessageInteractor:
    def __init__(
        self,
        store: IDataStore,
        storage: ObjectStorage,
        event_dispatcher: EventDispatcher,
    ):
        self.store = store
        self.storage = storage
        self.event_dispatcher = event_dispatcher

    @staticmethod
    def to_schema(message: Message) -> schemas.Message:
        data = row_record(message)
        data["sender"] = (
            schemas.SenderInfo.model_validate(message.sender) if message.sender else None
        )
        data["reactions"] = [asdict(summary) for summary in aggregate_reactions(message.reactions)]
        return schemas.Message.model_validate(data)

    async def list_messages(self, chat_id: str) -> List[schemas.Message]:
        messages = await self.store.messages.list_messages(chat_id)
        return [self.to_schema(message) for message in messages]

    async def send_message(
        self,
        chat_id: str,
        sender_id: str,
        text: Optional[str],
        reply_to_id: Optional[str] = None,
    ) -> None:
        """Post a text message; blank text is ignored."""
        content = (text or "").strip()
        if not content:
            return

        if reply_to_id:
            replied = await self.store.messages.get_message(reply_to_id)
            if not replied or replied.chat_id != chat_id:
                raise ValidationError("Replied message does not belong to this chat")

        await self._insert(
            Message(
                id=new_id(),
                chat_id=chat_id,
                sender_id=sender_id,
                content=content,
                message_type=MessageKind.TEXT,
                reply_to_id=reply_to_id,
            )
        )

    async def upload_attachment(
        self,
        chat_id: str,
        sender_id: str,
        filename: Optional[str],
        content_type: Optional[str],
        data: bytes,
    ) -> str:
        """Store a file and post it to the chat; returns its public URL.

        Objects are keyed ``<sender_id>/<epoch millis>.<ext>``; the
        timestamp is bumped until the key is free.
        """
        if not filename:
            raise ValidationError("File is required")

        extension = PurePosixPath(filename).suffix.lstrip(".") or "bin"
        stamp = int(utcnow().timestamp() * 1000)
        path = f"{sender_id}/{stamp}.{extension}"
        while self.storage.exists(path):
            stamp += 1
            path = f"{sender_id}/{stamp}.{extension}"

        await self.storage.upload(path, data, content_type)
        url = self.storage.get_public_url(path)

        kind = MessageKind.IMAGE if (content_type or "").startswith("image/") else MessageKind.FILE
        message = Message(
            id=new_id(),
            chat_id=chat_id,
            sender_id=sender_id,
            content=f"Shared {filename}",
            message_type=kind,
            file_url=url,
            file_name=filename,
            file_size=len(data),
        )
        try:
            created = await self._save(message)
        except Exception:
            # no message row points at the object, so it goes too
            await self.storage.remove(path)
            raise
        await self._publish(created)
        return url

    async def toggle_reaction(self, message_id: str, user_id: str, emoji: Optional[str]) -> bool:
        """Remove the user's reaction if present, else add it; True when it now exists."""
        if not emoji:
            raise ValidationError("Emoji is required")
        message = await self.store.messages.get_message(message_id)
        if not message:
            raise NotFoundError("Message not found")

        existing = await self.store.reactions.find(message_id, user_id, emoji)
        if existing:
            await self.store.reactions.remove(existing.id)
            await self.store.commit()
            await self.event_dispatcher.dispatch(
                ReactionChanged(event="DELETE", record=row_record(existing))
            )
            return False

        reaction = await self.store.reactions.add(
            Reaction(id=new_id(), message_id=message_id, user_id=user_id, emoji=emoji)
        )
        await self.store.commit()
        await self.event_dispatcher.dispatch(
            ReactionChanged(event="INSERT", record=row_record(reaction))
        )
        return True

    async def get_chat_id(self, message_id: str) -> str:
        message = await self.store.messages.get_message(message_id)
        if not message:
            raise NotFoundError("Message not found")
        return message.chat_id

    async def _insert(self, message: Message) -> Message:
        created = await self._save(message)
        await self._publish(created)
        return created

    async def _save(self, message: Message) -> Message:
        created = await self.store.messages.create_message(message)
        await self.store.commit()
        return created

    async def _publish(self, message: Message) -> None:
        await self.event_dispatcher.dispatch(
            MessageChanged(event="INSERT", record=row_record(message))
        )
