import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Date, ForeignKey, Text, Float, Integer
from sqlalchemy.orm import relationship
from database.base import Base
from models.category import shop_categories

class Shop(Base):
    __tablename__ = "shops"

    shop_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(36), ForeignKey("shop_owners.owner_id"), nullable=False, index=True)
    shop_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Location
    latitude = Column(Float, nullable=False, index=True)
    longitude = Column(Float, nullable=False, index=True)
    formatted_address = Column(String(500), nullable=True)
    street_address = Column(String(255), nullable=True)
    locality = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    plus_code = Column(String(50), nullable=True)

    # Discoverability: searchable only when both flags are set
    visibility_radius_km = Column(Float, nullable=False, default=5)
    is_visible = Column(Boolean, nullable=False, default=True)
    is_online = Column(Boolean, nullable=False, default=True)

    # Denormalized counters
    total_views = Column(Integer, default=0)
    total_chats = Column(Integer, default=0)
    average_rating = Column(Float, default=0.0)
    total_ratings = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("ShopOwner", back_populates="shops")
    categories = relationship("Category", secondary=shop_categories, back_populates="shops")
    photos = relationship(
        "ShopPhoto",
        back_populates="shop",
        order_by="ShopPhoto.photo_order",
        cascade="all, delete-orphan",
    )
    conversations = relationship("Conversation", back_populates="shop")
    ratings = relationship("Rating", back_populates="shop")

    def __repr__(self):
        return f"<Shop(shop_id={self.shop_id}, shop_name={self.shop_name})>"

    @property
    def category_names(self):
        """Category names as a list, in display order."""
        ordered = sorted(self.categories, key=lambda c: (c.display_order or 0, c.category_name))
        return [c.category_name for c in ordered]

    def to_dict(self):
        """Composed shop record: profile fields, owner name and categories."""
        return {
            "shop_id": self.shop_id,
            "owner_id": self.owner_id,
            "business_name": self.owner.business_name if self.owner else None,
            "shop_name": self.shop_name,
            "description": self.description,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "formatted_address": self.formatted_address,
            "street_address": self.street_address,
            "locality": self.locality,
            "city": self.city,
            "state": self.state,
            "country": self.country,
            "postal_code": self.postal_code,
            "plus_code": self.plus_code,
            "visibility_radius_km": self.visibility_radius_km,
            "is_visible": self.is_visible,
            "is_online": self.is_online,
            "total_views": self.total_views or 0,
            "total_chats": self.total_chats or 0,
            "average_rating": self.average_rating or 0.0,
            "total_ratings": self.total_ratings or 0,
            "categories": self.category_names,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class ShopPhoto(Base):
    __tablename__ = "shop_photos"

    photo_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    shop_id = Column(String(36), ForeignKey("shops.shop_id", ondelete="CASCADE"), nullable=False, index=True)
    photo_url = Column(String(1000), nullable=False)
    photo_order = Column(Integer, nullable=False, default=0)  # dense, 0-based
    created_at = Column(DateTime, default=datetime.utcnow)

    shop = relationship("Shop", back_populates="photos")


class ShopView(Base):
    """Daily view bucket for the owner dashboard."""
    __tablename__ = "shop_views"

    shop_id = Column(String(36), ForeignKey("shops.shop_id", ondelete="CASCADE"), primary_key=True)
    view_date = Column(Date, primary_key=True)
    view_count = Column(Integer, nullable=False, default=0)
