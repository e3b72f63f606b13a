import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from database.base import Base

class SenderType(str, enum.Enum):
    SHOP = "shop"
    CUSTOMER = "customer"

class MessageType(str, enum.Enum):
    TEXT = "text"
    DOCUMENT = "document"

class Conversation(Base):
    __tablename__ = "conversations"
    __table_args__ = (
        UniqueConstraint("shop_id", "user_id", name="uq_conversation_shop_user"),
    )

    conversation_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    shop_id = Column(String(36), ForeignKey("shops.shop_id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False, index=True)

    # Denormalized summary kept in step with message writes
    last_message = Column(Text, nullable=True)
    last_message_time = Column(DateTime, nullable=True)
    unread_count_shop = Column(Integer, nullable=False, default=0)
    unread_count_customer = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, index=True)

    # Relationships
    shop = relationship("Shop", back_populates="conversations")
    user = relationship("User", back_populates="conversations")
    messages = relationship(
        "Message",
        back_populates="conversation",
        order_by="Message.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Conversation(conversation_id={self.conversation_id}, shop_id={self.shop_id}, user_id={self.user_id})>"

    def to_dict(self):
        return {
            "conversation_id": self.conversation_id,
            "shop_id": self.shop_id,
            "user_id": self.user_id,
            "shop_name": self.shop.shop_name if self.shop else None,
            "user_name": self.user.full_name if self.user else None,
            "last_message": self.last_message,
            "last_message_time": self.last_message_time,
            "unread_count_shop": self.unread_count_shop,
            "unread_count_customer": self.unread_count_customer,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class Message(Base):
    __tablename__ = "messages"

    message_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    conversation_id = Column(
        String(36),
        ForeignKey("conversations.conversation_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_type = Column(String(20), nullable=False)  # shop | customer
    sender_id = Column(String(36), nullable=False)
    message_type = Column(String(20), nullable=False, default=MessageType.TEXT.value)

    # Text messages
    message_text = Column(Text, nullable=True)

    # Document messages
    file_url = Column(String(1000), nullable=True)
    file_name = Column(String(255), nullable=True)
    file_type = Column(String(255), nullable=True)
    file_size = Column(Integer, nullable=True)

    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    conversation = relationship("Conversation", back_populates="messages")

    def __repr__(self):
        return f"<Message(message_id={self.message_id}, type={self.message_type})>"

    def to_dict(self):
        return {
            "message_id": self.message_id,
            "conversation_id": self.conversation_id,
            "sender_type": self.sender_type,
            "sender_id": self.sender_id,
            "message_type": self.message_type,
            "message_text": self.message_text,
            "file_url": self.file_url,
            "file_name": self.file_name,
            "file_type": self.file_type,
            "file_size": self.file_size,
            "is_read": self.is_read,
            "created_at": self.created_at,
        }
