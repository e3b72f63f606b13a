"""
Read-only dashboard aggregation for shop owners and customers, plus the
customer's dashboard housekeeping (preferences and bulk clears).
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
import json
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from core.exceptions import ValidationError, ResourceNotFoundError, AuthorizationError
from models.chat import Conversation, Message
from models.rating import Rating
from models.shop import Shop, ShopView
from models.user import User

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5
FAVORITES_LIMIT = 3
CLEAR_CHATS = "clear-chats"
CLEAR_RATINGS = "clear-ratings"


def format_time_ago(minutes_ago: Optional[int]) -> str:
    if minutes_ago is None:
        return "Never"
    if minutes_ago < 1:
        return "Just now"
    if minutes_ago < 60:
        return f"{minutes_ago}m ago"
    if minutes_ago < 1440:
        return f"{minutes_ago // 60}h ago"
    return f"{minutes_ago // 1440}d ago"


def format_days_ago(days_ago: int) -> str:
    if days_ago == 0:
        return "Today"
    if days_ago == 1:
        return "Yesterday"
    if days_ago < 7:
        return f"{days_ago} days ago"
    if days_ago < 30:
        return f"{days_ago // 7} weeks ago"
    return f"{days_ago // 30} months ago"


def _minutes_since(moment: Optional[datetime], now: datetime) -> Optional[int]:
    if moment is None:
        return None
    return max(0, int((now - moment).total_seconds() // 60))


def owner_dashboard(db: Session, shop_id: str) -> Dict[str, Any]:
    if not shop_id:
        raise ValidationError("Shop ID is required")

    shop = db.query(Shop).filter(Shop.shop_id == shop_id).first()
    if not shop:
        raise ResourceNotFoundError("Shop not found")

    views_today = db.query(func.coalesce(func.sum(ShopView.view_count), 0)).filter(
        ShopView.shop_id == shop_id,
        ShopView.view_date == datetime.utcnow().date()
    ).scalar()

    recent_chats = db.query(Conversation).options(
        joinedload(Conversation.shop),
        joinedload(Conversation.user)
    ).filter(
        Conversation.shop_id == shop_id
    ).order_by(Conversation.updated_at.desc()).limit(RECENT_LIMIT).all()

    recent_ratings = db.query(Rating).options(
        joinedload(Rating.user)
    ).filter(
        Rating.shop_id == shop_id
    ).order_by(Rating.created_at.desc()).limit(RECENT_LIMIT).all()

    return {
        "stats": {
            "totalChats": shop.total_chats or 0,
            "averageRating": shop.average_rating or 0,
            "viewsToday": int(views_today or 0),
            "visibilityRadius": shop.visibility_radius_km or 5,
        },
        "recentChats": [c.to_dict() for c in recent_chats],
        "recentRatings": [r.to_dict() for r in recent_ratings],
    }


def _get_customer(db: Session, user_id: str, active_only: bool = True) -> User:
    if not user_id:
        raise ValidationError("User ID is required")

    query = db.query(User).filter(User.user_id == user_id)
    if active_only:
        query = query.filter(User.is_active == True)
    user = query.first()
    if not user:
        raise ResourceNotFoundError("User not found or inactive" if active_only else "User not found")
    return user


def _favorite_shops(db: Session, user_id: str) -> List[Dict[str, Any]]:
    """Visible shops this customer talked to or rated most."""
    chat_counts = dict(
        db.query(Conversation.shop_id, func.count(Conversation.conversation_id))
        .filter(Conversation.user_id == user_id)
        .group_by(Conversation.shop_id)
        .all()
    )
    last_interactions = dict(
        db.query(Conversation.shop_id, func.max(Conversation.last_message_time))
        .filter(Conversation.user_id == user_id)
        .group_by(Conversation.shop_id)
        .all()
    )
    rating_counts = dict(
        db.query(Rating.shop_id, func.count(Rating.rating_id))
        .filter(Rating.user_id == user_id)
        .group_by(Rating.shop_id)
        .all()
    )

    shop_ids = set(chat_counts) | set(rating_counts)
    if not shop_ids:
        return []

    shops = db.query(Shop).options(selectinload(Shop.categories)).filter(
        Shop.shop_id.in_(shop_ids),
        Shop.is_visible == True
    ).all()

    ranked = sorted(
        shops,
        key=lambda s: chat_counts.get(s.shop_id, 0) + rating_counts.get(s.shop_id, 0),
        reverse=True
    )[:FAVORITES_LIMIT]

    favorites = []
    for shop in ranked:
        chats = chat_counts.get(shop.shop_id, 0)
        ratings = rating_counts.get(shop.shop_id, 0)
        favorites.append({
            "id": shop.shop_id,
            "name": shop.shop_name,
            "categories": shop.category_names,
            "rating": shop.average_rating or 0,
            "interactions": {
                "chats": chats,
                "ratings": ratings,
                "total": chats + ratings,
            },
            "lastInteraction": last_interactions.get(shop.shop_id),
        })
    return favorites


def customer_dashboard(db: Session, user_id: str) -> Dict[str, Any]:
    user = _get_customer(db, user_id, active_only=False)
    if not user.is_active:
        raise AuthorizationError("User account is inactive")

    now = datetime.utcnow()

    total_chats = db.query(func.count(Conversation.conversation_id)).filter(
        Conversation.user_id == user_id
    ).scalar()
    total_ratings = db.query(func.count(Rating.rating_id)).filter(
        Rating.user_id == user_id
    ).scalar()
    unread = db.query(func.coalesce(func.sum(Conversation.unread_count_customer), 0)).filter(
        Conversation.user_id == user_id
    ).scalar()

    conversations = db.query(Conversation).join(Shop).options(
        joinedload(Conversation.shop).selectinload(Shop.categories)
    ).filter(
        Conversation.user_id == user_id,
        Shop.is_visible == True
    ).order_by(Conversation.updated_at.desc()).limit(RECENT_LIMIT).all()

    ratings = db.query(Rating).join(Shop).options(
        joinedload(Rating.shop).selectinload(Shop.categories)
    ).filter(
        Rating.user_id == user_id,
        Shop.is_visible == True
    ).order_by(Rating.created_at.desc()).limit(RECENT_LIMIT).all()

    profile = user.to_profile()
    profile["isActive"] = user.is_active

    return {
        "user": profile,
        "stats": {
            "totalChats": total_chats or 0,
            "totalRatings": total_ratings or 0,
            "unreadMessages": int(unread or 0),
        },
        "recentChats": [
            {
                "id": c.conversation_id,
                "shopId": c.shop_id,
                "shopName": c.shop.shop_name,
                "categories": c.shop.category_names,
                "address": c.shop.formatted_address,
                "lastMessage": c.last_message or "No messages yet",
                "lastMessageTime": c.last_message_time,
                "timeAgo": format_time_ago(_minutes_since(c.last_message_time, now)),
                "unreadCount": c.unread_count_customer or 0,
                "updatedAt": c.updated_at,
            }
            for c in conversations
        ],
        "recentRatings": [
            {
                "id": r.rating_id,
                "shopId": r.shop_id,
                "shopName": r.shop.shop_name,
                "categories": r.shop.category_names,
                "rating": r.rating_value,
                "comment": r.review_comment or "",
                "createdAt": r.created_at,
                "timeAgo": format_days_ago(max(0, (now - r.created_at).days)),
            }
            for r in ratings
        ],
        "favoriteShops": _favorite_shops(db, user_id),
    }


def update_preferences(db: Session, user_id: str, preferences: Optional[Dict[str, Any]]) -> None:
    user = _get_customer(db, user_id)
    if preferences:
        user.preferences = json.dumps(preferences)
        db.commit()
        logger.info(f"Dashboard preferences updated for user {user_id}")


def clear_customer_data(db: Session, user_id: str, action: Optional[str]) -> str:
    """Bulk-delete a customer's chats or ratings; returns a confirmation message."""
    user = _get_customer(db, user_id)

    if action == CLEAR_CHATS:
        conversation_ids = [
            row.conversation_id for row in
            db.query(Conversation.conversation_id).filter(Conversation.user_id == user.user_id).all()
        ]
        if conversation_ids:
            db.query(Message).filter(
                Message.conversation_id.in_(conversation_ids)
            ).delete(synchronize_session=False)
            db.query(Conversation).filter(
                Conversation.conversation_id.in_(conversation_ids)
            ).delete(synchronize_session=False)
        db.commit()
        logger.info(f"Cleared {len(conversation_ids)} conversations for user {user_id}")
        return "All chats cleared successfully"

    if action == CLEAR_RATINGS:
        shop_ids = [
            row.shop_id for row in
            db.query(Rating.shop_id).filter(Rating.user_id == user.user_id).all()
        ]
        db.query(Rating).filter(Rating.user_id == user.user_id).delete(synchronize_session=False)
        # Keep the shops' denormalized rating aggregates in step
        for shop in db.query(Shop).filter(Shop.shop_id.in_(shop_ids)).all():
            stats = Rating.get_shop_average_rating(db, shop.shop_id)
            shop.average_rating = stats['average_rating']
            shop.total_ratings = stats['total_ratings']
        db.commit()
        logger.info(f"Cleared ratings for user {user_id}")
        return "All ratings cleared successfully"

    raise ValidationError("Invalid action", field="action")
