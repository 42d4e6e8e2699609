# chatterlite/api/chats.py
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile

from chatterlite.api.dependencies import (
    get_chat_interactor,
    get_current_user,
    get_message_interactor,
    get_storage,
)
from chatterlite.infrastructure import schemas
from chatterlite.infrastructure.storage import ObjectStorage, read_upload
from chatterlite.interactors.chat_interactor import ChatInteractor
from chatterlite.interactors.message_interactor import MessageInteractor

router = APIRouter()


@router.get("", response_model=List[schemas.ChatSummary])
async def read_chats(
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    return await chat_interactor.get_chat_summaries(current_user.id)


@router.post("", response_model=schemas.Chat)
async def create_chat(
    chat: schemas.ChatCreate,
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    return await chat_interactor.create_chat(current_user.id, chat)


@router.post("/{chat_id}/members", status_code=204)
async def add_chat_member(
    chat_id: str,
    payload: schemas.ChatMemberAdd,
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    await chat_interactor.ensure_member(chat_id, current_user.id)
    await chat_interactor.add_member(chat_id, payload.user_id)


@router.get("/{chat_id}/messages", response_model=List[schemas.Message])
async def read_messages(
    chat_id: str,
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
    message_interactor: MessageInteractor = Depends(get_message_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    await chat_interactor.ensure_member(chat_id, current_user.id)
    return await message_interactor.list_messages(chat_id)


@router.post("/{chat_id}/messages", status_code=204)
async def send_message(
    chat_id: str,
    message: schemas.MessageCreate,
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
    message_interactor: MessageInteractor = Depends(get_message_interactor),
    current_user: schemas.User = Depends(get_current_user),
):
    await chat_interactor.ensure_member(chat_id, current_user.id)
    await message_interactor.send_message(
        chat_id, current_user.id, message.content, message.reply_to_id
    )


@router.post("/{chat_id}/attachments", response_model=schemas.AttachmentResponse)
async def upload_attachment(
    chat_id: str,
    file: UploadFile = File(...),
    chat_interactor: ChatInteractor = Depends(get_chat_interactor),
    message_interactor: MessageInteractor = Depends(get_message_interactor),
    storage: ObjectStorage = Depends(get_storage),
    current_user: schemas.User = Depends(get_current_user),
):
    await chat_interactor.ensure_member(chat_id, current_user.id)
    data = await read_upload(file, storage.max_size)
    url = await message_interactor.upload_attachment(
        chat_id, current_user.id, file.filename, file.content_type, data
    )
    return schemas.AttachmentResponse(url=url)
