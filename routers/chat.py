from typing import Optional
import json
import logging

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from core.config import settings
from core.exceptions import ValidationError
from core.response import success_response
from database.connection import get_db
from schemas.chat import ConversationCreate, TextMessageCreate, MarkReadRequest
from services import chat as chat_service
from services.storage import LocalBlobStore

logger = logging.getLogger(__name__)

router = APIRouter()

def get_blob_store(request: Request) -> LocalBlobStore:
    return request.app.state.blob_store

@router.get("")
def get_conversations(
    shop_id: Optional[str] = Query(None, alias="shopId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
):
    """Conversations for a shop or a customer"""
    conversations = chat_service.list_conversations(db, shop_id=shop_id, user_id=user_id)
    return success_response(conversations=conversations)

@router.post("")
def create_conversation(data: ConversationCreate, db: Session = Depends(get_db)):
    """Open (or reopen) the conversation between a shop and a customer"""
    conversation_id = chat_service.get_or_create_conversation(db, data.shop_id, data.user_id)
    return success_response(conversation_id=conversation_id)

@router.get("/messages")
def get_messages(
    conversation_id: Optional[str] = Query(None, alias="conversationId"),
    db: Session = Depends(get_db)
):
    """Full message history, oldest first"""
    return success_response(messages=chat_service.list_messages(db, conversation_id))

@router.post("/messages")
async def send_message(
    request: Request,
    db: Session = Depends(get_db),
    blob_store: LocalBlobStore = Depends(get_blob_store)
):
    """Send a text message (JSON) or a document (multipart/form-data with `file`)"""
    content_type = request.headers.get("content-type", "")

    if "multipart/form-data" in content_type:
        form = await request.form()
        upload = form.get("file")
        file_name = file_type = content = None

        if isinstance(upload, UploadFile):
            # Refuse oversized uploads before buffering them
            if upload.size is not None and upload.size > settings.MAX_UPLOAD_BYTES:
                raise ValidationError(
                    f"File size exceeds {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB limit",
                    field="file"
                )
            file_name = upload.filename
            file_type = upload.content_type
            content = await upload.read()

        result = await run_in_threadpool(
            chat_service.send_document_message,
            db,
            blob_store,
            form.get("conversationId"),
            form.get("senderType"),
            form.get("senderId"),
            file_name,
            file_type,
            content,
        )
        return success_response(**result)

    try:
        data = TextMessageCreate.parse_obj(await request.json())
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Request body must be JSON or multipart/form-data")
    except PydanticValidationError as e:
        raise ValidationError("Request validation failed", details=e.errors())

    result = await run_in_threadpool(chat_service.send_text_message, db, data)
    return success_response(**result)

@router.put("/messages")
def mark_messages_read(data: MarkReadRequest, db: Session = Depends(get_db)):
    """Mark the other side's messages as read"""
    chat_service.mark_read(db, data)
    return success_response(message="Messages marked as read")
