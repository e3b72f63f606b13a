import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database.base import Base

class ShopOwner(Base):
    __tablename__ = "shop_owners"

    owner_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    business_name = Column(String(255), nullable=False)
    owner_name = Column(String(255), nullable=True)
    phone_number = Column(String(20), unique=True, index=True, nullable=False)
    email = Column(String(255), nullable=True)
    profile_picture_url = Column(String(500), nullable=True)
    is_verified = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    shops = relationship("Shop", back_populates="owner")
    notification_settings = relationship("NotificationSettings", uselist=False, back_populates="owner")

    def __repr__(self):
        return f"<ShopOwner(owner_id={self.owner_id}, business_name={self.business_name})>"


class NotificationSettings(Base):
    __tablename__ = "notification_settings"

    owner_id = Column(String(36), ForeignKey("shop_owners.owner_id"), primary_key=True)
    new_message = Column(Boolean, default=True)
    new_rating = Column(Boolean, default=True)
    daily_summary = Column(Boolean, default=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("ShopOwner", back_populates="notification_settings")
