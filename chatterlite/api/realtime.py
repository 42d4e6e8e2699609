# chatterlite/api/realtime.py
"""WebSocket endpoints that host one synchronizer per connection."""

import json
from typing import List, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from chatterlite.domain.errors import ChatterLiteError
from chatterlite.infrastructure import schemas
from chatterlite.interactors.auth_interactor import AuthInteractor
from chatterlite.interactors.chat_interactor import ChatInteractor
from chatterlite.sync.chat_list import ChatListSynchronizer
from chatterlite.sync.message_stream import MessageStream

router = APIRouter()


def _dump(items) -> list:
    return [item.model_dump(mode="json", by_alias=True) for item in items]


async def _authenticate(websocket: WebSocket, token: Optional[str]) -> Optional[schemas.User]:
    state = websocket.app.state
    if not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return None
    try:
        async with state.store_provider.session() as store:
            auth_interactor = AuthInteractor(
                store, state.security_service, state.event_dispatcher, state.auth_notifier
            )
            return await auth_interactor.get_current_user(token)
    except ChatterLiteError as e:
        state.logger.info(f"Rejected realtime connection: {e.message}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return None


@router.websocket("/chats")
async def chat_list_updates(websocket: WebSocket, token: Optional[str] = None):
    state = websocket.app.state
    user = await _authenticate(websocket, token)
    if user is None:
        return
    await websocket.accept()

    async def push(chats: List[schemas.ChatSummary]) -> None:
        await websocket.send_json({"type": "chats", "chats": _dump(chats)})

    synchronizer = ChatListSynchronizer(
        state.store_provider,
        state.change_feed,
        state.event_dispatcher,
        user.id,
        state.logger,
        on_update=push,
    )
    try:
        async with synchronizer:
            while True:
                await websocket.receive_text()
    except WebSocketDisconnect:
        state.logger.info(f"Chat list stream closed for user {user.id}")


@router.websocket("/chats/{chat_id}/messages")
async def message_updates(websocket: WebSocket, chat_id: str, token: Optional[str] = None):
    """Pushes the message list of one chat and accepts commands.

    Commands are JSON objects: ``{"type": "send", "content": ..., "replyToId": ...}``
    and ``{"type": "react", "messageId": ..., "emoji": ...}``.
    """
    state = websocket.app.state
    user = await _authenticate(websocket, token)
    if user is None:
        return

    async with state.store_provider.session() as store:
        is_member = await ChatInteractor(store, state.event_dispatcher).is_member(chat_id, user.id)
    if not is_member:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await websocket.accept()

    async def push(messages: List[schemas.Message]) -> None:
        await websocket.send_json({"type": "messages", "messages": _dump(messages)})

    stream = MessageStream(
        state.store_provider,
        state.change_feed,
        state.event_dispatcher,
        state.storage,
        user.id,
        state.logger,
        on_update=push,
    )
    try:
        async with stream:
            await stream.select_chat(chat_id)
            while True:
                try:
                    command = json.loads(await websocket.receive_text())
                except ValueError:
                    command = None
                if not isinstance(command, dict):
                    await websocket.send_json({"type": "error", "message": "Invalid command"})
                    continue
                try:
                    if command.get("type") == "send":
                        await stream.send_message(command.get("content"), command.get("replyToId"))
                    elif command.get("type") == "react":
                        await stream.toggle_reaction(command.get("messageId"), command.get("emoji"))
                    else:
                        await websocket.send_json({"type": "error", "message": "Unknown command"})
                except ChatterLiteError as e:
                    await websocket.send_json({"type": "error", "message": e.message})
    except WebSocketDisconnect:
        state.logger.info(f"Message stream closed for user {user.id} in chat {chat_id}")
