from typing import List, Dict, Any
from datetime import datetime
import logging
import uuid

from sqlalchemy.orm import Session, joinedload

from core.exceptions import ValidationError, ResourceNotFoundError
from database.upsert import build_upsert
from models.rating import Rating
from models.shop import Shop
from models.user import User
from schemas.rating import RatingSubmit

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5

class RatingService:

    @staticmethod
    def submit_rating(db: Session, data: RatingSubmit) -> None:
        """Create or overwrite the caller's single rating for a shop.

        The (shop_id, user_id) unique key makes this one atomic statement, so
        repeated submissions never produce a second row. The shop's average
        and count are recomputed in the same transaction.
        """
        if not data.shop_id or not data.user_id or not data.rating_value:
            raise ValidationError("Shop ID, User ID, and rating value are required")

        if data.rating_value < MIN_RATING or data.rating_value > MAX_RATING:
            raise ValidationError(
                f"Rating value must be between {MIN_RATING} and {MAX_RATING}",
                field="ratingValue"
            )

        shop = db.query(Shop).filter(Shop.shop_id == data.shop_id).first()
        if not shop:
            raise ResourceNotFoundError("Shop not found")
        if not db.query(User.user_id).filter(User.user_id == data.user_id).first():
            raise ResourceNotFoundError("User not found")

        now = datetime.utcnow()
        db.execute(build_upsert(
            db,
            Rating,
            {
                "rating_id": str(uuid.uuid4()),
                "shop_id": data.shop_id,
                "user_id": data.user_id,
                "rating_value": data.rating_value,
                "review_comment": data.review_comment,
                "created_at": now,
                "updated_at": now,
            },
            conflict_columns=("shop_id", "user_id"),
            update_columns=("rating_value", "review_comment", "updated_at"),
        ))

        RatingService._update_shop_rating_stats(db, shop)
        db.commit()

        logger.info(f"Rating {data.rating_value} stored for shop {data.shop_id} by user {data.user_id}")

    @staticmethod
    def get_shop_ratings(db: Session, shop_id: str) -> List[Dict[str, Any]]:
        """All ratings for a shop with the author's name, newest first"""
        if not shop_id:
            raise ValidationError("Shop ID is required")

        ratings = db.query(Rating).options(
            joinedload(Rating.user)
        ).filter(
            Rating.shop_id == shop_id
        ).order_by(Rating.created_at.desc()).all()

        return [r.to_dict() for r in ratings]

    @staticmethod
    def _update_shop_rating_stats(db: Session, shop: Shop):
        stats = Rating.get_shop_average_rating(db, shop.shop_id)
        shop.average_rating = stats['average_rating']
        shop.total_ratings = stats['total_ratings']
