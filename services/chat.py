from datetime import datetime
from typing import Any, Dict, List, Optional
import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from core.config import settings
from core.exceptions import ValidationError, ResourceNotFoundError
from models.chat import Conversation, Message, SenderType, MessageType
from models.shop import Shop
from models.user import User
from schemas.chat import TextMessageCreate, MarkReadRequest
from services.storage import LocalBlobStore

logger = logging.getLogger(__name__)

SENDER_TYPES = tuple(t.value for t in SenderType)

def _check_party(value: str, field: str) -> SenderType:
    try:
        return SenderType(value)
    except ValueError:
        raise ValidationError(f"{field} must be one of: {', '.join(SENDER_TYPES)}", field=field)

def _find_conversation(db: Session, shop_id: str, user_id: str) -> Optional[Conversation]:
    return db.query(Conversation).filter(
        Conversation.shop_id == shop_id,
        Conversation.user_id == user_id
    ).first()

def _get_conversation(db: Session, conversation_id: str) -> Conversation:
    conversation = db.query(Conversation).filter(
        Conversation.conversation_id == conversation_id
    ).first()
    if not conversation:
        raise ResourceNotFoundError("Conversation not found")
    return conversation

def list_conversations(db: Session, shop_id: Optional[str] = None, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Conversations for one shop or one customer, most recently active first."""
    if not shop_id and not user_id:
        raise ValidationError("Shop ID or User ID is required")

    query = db.query(Conversation).options(
        joinedload(Conversation.shop),
        joinedload(Conversation.user)
    )
    if shop_id:
        query = query.filter(Conversation.shop_id == shop_id)
    else:
        query = query.filter(Conversation.user_id == user_id)

    conversations = query.order_by(Conversation.updated_at.desc()).all()
    return [c.to_dict() for c in conversations]

def get_or_create_conversation(db: Session, shop_id: str, user_id: str) -> str:
    """Return the conversation id for (shop, customer), creating it on first contact."""
    if not shop_id or not user_id:
        raise ValidationError("Shop ID and User ID are required")

    existing = _find_conversation(db, shop_id, user_id)
    if existing:
        return existing.conversation_id

    if not db.query(Shop.shop_id).filter(Shop.shop_id == shop_id).first():
        raise ResourceNotFoundError("Shop not found")
    if not db.query(User.user_id).filter(User.user_id == user_id).first():
        raise ResourceNotFoundError("User not found")

    conversation = Conversation(
        conversation_id=str(uuid.uuid4()),
        shop_id=shop_id,
        user_id=user_id
    )
    db.add(conversation)
    try:
        db.flush()
    except IntegrityError:
        # A concurrent first contact won the unique (shop_id, user_id) slot
        db.rollback()
        winner = _find_conversation(db, shop_id, user_id)
        if winner is None:
            raise
        logger.info(f"Conversation for shop {shop_id} / user {user_id} created concurrently")
        return winner.conversation_id

    db.query(Shop).filter(Shop.shop_id == shop_id).update(
        {Shop.total_chats: Shop.total_chats + 1},
        synchronize_session=False
    )
    db.commit()

    logger.info(f"Conversation created: {conversation.conversation_id}")
    return conversation.conversation_id

def list_messages(db: Session, conversation_id: str) -> List[Dict[str, Any]]:
    if not conversation_id:
        raise ValidationError("Conversation ID is required")

    messages = db.query(Message).filter(
        Message.conversation_id == conversation_id
    ).order_by(Message.created_at.asc()).all()
    return [m.to_dict() for m in messages]

def _append(db: Session, conversation: Conversation, message: Message, preview: str):
    """Persist a message and refresh the conversation summary in one commit."""
    now = datetime.utcnow()
    message.created_at = now
    db.add(message)

    conversation.last_message = preview
    conversation.last_message_time = now
    conversation.updated_at = now
    if message.sender_type == SenderType.SHOP.value:
        conversation.unread_count_customer = (conversation.unread_count_customer or 0) + 1
    else:
        conversation.unread_count_shop = (conversation.unread_count_shop or 0) + 1

    db.commit()

def send_text_message(db: Session, data: TextMessageCreate) -> Dict[str, Any]:
    if not data.conversation_id or not data.sender_type or not data.sender_id or not data.message_text:
        raise ValidationError("Missing required fields")
    sender_type = _check_party(data.sender_type, "senderType")

    conversation = _get_conversation(db, data.conversation_id)
    message = Message(
        message_id=str(uuid.uuid4()),
        conversation_id=conversation.conversation_id,
        sender_type=sender_type.value,
        sender_id=data.sender_id,
        message_type=MessageType.TEXT.value,
        message_text=data.message_text,
    )
    _append(db, conversation, message, data.message_text)

    logger.info(f"Text message {message.message_id} sent in {conversation.conversation_id}")
    return {"message_id": message.message_id}

def send_document_message(
    db: Session,
    blob_store: LocalBlobStore,
    conversation_id: Optional[str],
    sender_type: Optional[str],
    sender_id: Optional[str],
    file_name: Optional[str],
    file_type: Optional[str],
    content: Optional[bytes],
) -> Dict[str, Any]:
    """Store an attachment and record it as a document message."""
    if not conversation_id or not sender_type or not sender_id or content is None or not file_name:
        raise ValidationError("Missing required fields")
    party = _check_party(sender_type, "senderType")

    if len(content) > settings.MAX_UPLOAD_BYTES:
        logger.warning(f"Rejected {len(content)} byte upload to {conversation_id}")
        raise ValidationError(
            f"File size exceeds {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB limit",
            field="file"
        )

    conversation = _get_conversation(db, conversation_id)
    file_url = blob_store.save(content, file_name)

    message = Message(
        message_id=str(uuid.uuid4()),
        conversation_id=conversation.conversation_id,
        sender_type=party.value,
        sender_id=sender_id,
        message_type=MessageType.DOCUMENT.value,
        file_url=file_url,
        file_name=file_name,
        file_type=file_type or "application/octet-stream",
        file_size=len(content),
    )
    _append(db, conversation, message, f"📎 {file_name}")

    logger.info(f"Document message {message.message_id} sent in {conversation.conversation_id}")
    return {
        "message_id": message.message_id,
        "file_url": file_url,
        "file_name": file_name,
    }

def mark_read(db: Session, data: MarkReadRequest) -> int:
    """Mark the counterpart's messages read and zero the reader's unread counter."""
    if not data.conversation_id or not data.reader_type:
        raise ValidationError("Conversation ID and reader type are required")
    reader = _check_party(data.reader_type, "readerType")

    conversation = _get_conversation(db, data.conversation_id)
    marked = db.query(Message).filter(
        Message.conversation_id == conversation.conversation_id,
        Message.sender_type != reader.value,
        Message.is_read == False
    ).update({Message.is_read: True}, synchronize_session=False)

    if reader == SenderType.SHOP:
        conversation.unread_count_shop = 0
    else:
        conversation.unread_count_customer = 0

    db.commit()
    logger.info(f"{marked} messages marked read in {conversation.conversation_id} by {reader.value}")
    return marked
