# chatterlite/api/messages.py
from fastapi import APIRouter, Depends

from chatterlite.api.dependencies import (
    get_chat_interactor,
    get_current_user,
    get_message_interactor,
)
from chatterlite.infrastructure import schemas
from chatterlite.interactors.chat_interactor import ChatInteractor
from chatterlite.interactors.message_interactor import MessageInteractor

router = APIRouter()


@router.post("/{message_id}/reactions", response_model=schemas.ReactionToggleResult)
async def toggle_reaction(
    message_id: str,
    payload: schemas.ReactionToggle,
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
    message_interactor: MessageInteractor = Depends(get_message_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    chat_id = await message_interactor.get_chat_id(message_id)
    await chat_interactor.ensure_member(chat_id, current_user.id)
    reacted = await message_interactor.toggle_reaction(
        message_id, current_user.id, payload.emoji
    )
    return schemas.ReactionToggleResult(
        message_id=message_id, emoji=payload.emoji, reacted=reacted
    )
