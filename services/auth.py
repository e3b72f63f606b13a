from datetime import datetime
from typing import Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging
import uuid

from core.exceptions import ValidationError, ConflictError, ResourceNotFoundError
from models.owner import ShopOwner, NotificationSettings
from models.user import User
from schemas.user import LoginRequest, OwnerRegister, CustomerRegister

logger = logging.getLogger(__name__)

USER_TYPE_OWNER = "owner"
USER_TYPE_CUSTOMER = "customer"
USER_TYPES = (USER_TYPE_OWNER, USER_TYPE_CUSTOMER)

def get_owner_by_phone(db: Session, phone_number: str) -> Optional[ShopOwner]:
    return db.query(ShopOwner).filter(ShopOwner.phone_number == phone_number).first()

def get_customer_by_phone(db: Session, phone_number: str) -> Optional[User]:
    return db.query(User).filter(User.phone_number == phone_number).first()

def register_owner(db: Session, data: OwnerRegister) -> ShopOwner:
    """Register a shop owner and their default notification settings."""
    if not data.business_name or not data.phone_number:
        raise ValidationError("Business name and phone number are required")

    if get_owner_by_phone(db, data.phone_number):
        logger.warning(f"Owner registration with existing phone: {data.phone_number}")
        raise ConflictError("Phone number already registered")

    owner = ShopOwner(
        owner_id=str(uuid.uuid4()),
        business_name=data.business_name,
        owner_name=data.owner_name,
        phone_number=data.phone_number,
        email=data.email,
    )
    db.add(owner)
    db.add(NotificationSettings(owner_id=owner.owner_id))

    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration of the same phone
        db.rollback()
        logger.warning(f"Concurrent owner registration for phone: {data.phone_number}")
        raise ConflictError("Phone number already registered")

    logger.info(f"Shop owner registered: {owner.owner_id}")
    return owner

def register_customer(db: Session, data: CustomerRegister) -> User:
    """Register a customer account."""
    if not data.full_name or not data.phone_number:
        raise ValidationError("Full name and phone number are required")

    if get_customer_by_phone(db, data.phone_number):
        logger.warning(f"Customer registration with existing phone: {data.phone_number}")
        raise ConflictError("Phone number already registered")

    user = User(
        user_id=str(uuid.uuid4()),
        full_name=data.full_name,
        phone_number=data.phone_number,
        email=data.email,
    )
    db.add(user)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Concurrent customer registration for phone: {data.phone_number}")
        raise ConflictError("Phone number already registered")

    logger.info(f"Customer registered: {user.user_id}")
    return user

def login(db: Session, data: LoginRequest) -> Dict[str, Any]:
    """Look up an active account by phone and stamp its last login."""
    if not data.phone_number or not data.user_type:
        raise ValidationError("Phone number and user type are required")

    if data.user_type not in USER_TYPES:
        raise ValidationError(f"User type must be one of: {', '.join(USER_TYPES)}", field="userType")

    if data.user_type == USER_TYPE_OWNER:
        account = db.query(ShopOwner).filter(
            ShopOwner.phone_number == data.phone_number,
            ShopOwner.is_active == True
        ).first()
    else:
        account = db.query(User).filter(
            User.phone_number == data.phone_number,
            User.is_active == True
        ).first()

    if not account:
        logger.warning(f"Login attempt for unknown or inactive {data.user_type}: {data.phone_number}")
        raise ResourceNotFoundError("User not found or inactive")

    account.last_login = datetime.utcnow()
    db.commit()

    if data.user_type == USER_TYPE_OWNER:
        account_id, name = account.owner_id, account.business_name
    else:
        account_id, name = account.user_id, account.full_name

    logger.info(f"Login successful for {data.user_type}: {account_id}")
    return {
        "id": account_id,
        "name": name,
        "phoneNumber": account.phone_number,
        "type": data.user_type,
    }
