from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from core.response import success_response
from database.connection import get_db
from schemas.user import LoginRequest, OwnerRegister, CustomerRegister
from services import auth as auth_service

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/login")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Log an owner or customer in by phone number."""
    logger.info(f"Login attempt for {data.user_type}: {data.phone_number}")
    user = auth_service.login(db, data)
    return success_response(message="Login successful", user=user)

@router.post("/register-owner", status_code=status.HTTP_201_CREATED)
def register_owner(data: OwnerRegister, db: Session = Depends(get_db)):
    """Register a shop owner."""
    owner = auth_service.register_owner(db, data)
    return success_response(
        message="Shop owner registered successfully",
        owner_id=owner.owner_id
    )

@router.post("/register-user", status_code=status.HTTP_201_CREATED)
def register_user(data: CustomerRegister, db: Session = Depends(get_db)):
    """Register a customer."""
    user = auth_service.register_customer(db, data)
    return success_response(
        message="User registered successfully",
        user_id=user.user_id
    )
