from typing import Any, Dict
import logging
import re

from sqlalchemy.orm import Session

from core.exceptions import ValidationError, ResourceNotFoundError
from models.user import User
from schemas.user import ProfileUpdate

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

def update_profile(db: Session, data: ProfileUpdate) -> Dict[str, Any]:
    """Update a customer's display name and email."""
    if not data.user_id:
        raise ValidationError("User ID is required")

    if not data.full_name or not data.full_name.strip():
        raise ValidationError("Full name is required", field="fullName")

    email = data.email.strip() if data.email else ""
    if email and not EMAIL_PATTERN.match(email):
        logger.warning(f"Invalid email format for user {data.user_id}: {email}")
        raise ValidationError("Invalid email format", field="email")

    user = db.query(User).filter(User.user_id == data.user_id).first()
    if not user:
        raise ResourceNotFoundError("User not found")

    user.full_name = data.full_name.strip()
    user.email = email or None
    db.commit()
    db.refresh(user)

    logger.info(f"Profile updated for user {user.user_id}")
    return user.to_profile()

def get_profile(db: Session, user_id: str) -> Dict[str, Any]:
    if not user_id:
        raise ValidationError("User ID is required")

    user = db.query(User).filter(
        User.user_id == user_id,
        User.is_active == True
    ).first()
    if not user:
        raise ResourceNotFoundError("User not found")
    return user.to_profile()
