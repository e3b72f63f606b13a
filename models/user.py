import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Text
from sqlalchemy.orm import relationship
from database.base import Base

class User(Base):
    """A customer account."""
    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    full_name = Column(String(255), nullable=False)
    phone_number = Column(String(20), unique=True, index=True, nullable=False)
    email = Column(String(255), nullable=True)
    profile_picture_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True)
    last_login = Column(DateTime, nullable=True)
    preferences = Column(Text, nullable=True)  # opaque JSON blob
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    conversations = relationship("Conversation", back_populates="user")
    ratings = relationship("Rating", back_populates="user")

    def __repr__(self):
        return f"<User(user_id={self.user_id}, full_name={self.full_name})>"

    def to_profile(self):
        return {
            "id": self.user_id,
            "name": self.full_name,
            "phoneNumber": self.phone_number,
            "email": self.email or "",
            "memberSince": self.created_at,
            "lastLogin": self.last_login,
        }
