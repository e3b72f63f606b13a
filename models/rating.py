import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import relationship, Session
from database.base import Base

class Rating(Base):
    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("shop_id", "user_id", name="uq_rating_shop_user"),
        CheckConstraint("rating_value BETWEEN 1 AND 5", name="ck_rating_value_range"),
    )

    rating_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    shop_id = Column(String(36), ForeignKey("shops.shop_id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False, index=True)
    rating_value = Column(Integer, nullable=False)  # 1-5 stars
    review_comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="ratings")
    shop = relationship("Shop", back_populates="ratings")

    def __repr__(self):
        return f"<Rating(rating_id={self.rating_id}, shop_id={self.shop_id}, rating_value={self.rating_value})>"

    @classmethod
    def get_shop_average_rating(cls, db: Session, shop_id: str):
        """Calculate average rating for a shop"""
        result = db.query(
            func.avg(cls.rating_value).label('average'),
            func.count(cls.rating_id).label('total')
        ).filter(cls.shop_id == shop_id).first()

        return {
            'average_rating': round(float(result.average), 1) if result.average else 0.0,
            'total_ratings': result.total or 0
        }

    def to_dict(self):
        return {
            "rating_id": self.rating_id,
            "shop_id": self.shop_id,
            "user_id": self.user_id,
            "user_name": self.user.full_name if self.user else None,
            "rating_value": self.rating_value,
            "review_comment": self.review_comment,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
