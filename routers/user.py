from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from core.response import success_response
from database.connection import get_db
from schemas.user import ProfileUpdate, PreferencesUpdate
from services import dashboard as dashboard_service
from services import user as user_service

router = APIRouter()

@router.get("/dashboard")
def get_customer_dashboard(
    user_id: Optional[str] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
):
    return success_response(data=dashboard_service.customer_dashboard(db, user_id))

@router.post("/dashboard")
def update_dashboard_preferences(data: PreferencesUpdate, db: Session = Depends(get_db)):
    dashboard_service.update_preferences(db, data.user_id, data.preferences)
    return success_response(message="Preferences updated successfully")

@router.delete("/dashboard")
def clear_dashboard_data(
    user_id: Optional[str] = Query(None, alias="userId"),
    action: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Bulk clear a customer's chats (action=clear-chats) or ratings (action=clear-ratings)"""
    message = dashboard_service.clear_customer_data(db, user_id, action)
    return success_response(message=message)

@router.put("/update-profile")
def update_customer_profile(data: ProfileUpdate, db: Session = Depends(get_db)):
    user = user_service.update_profile(db, data)
    return success_response(message="Profile updated successfully", user=user)

@router.get("/update-profile")
def get_customer_profile(
    user_id: Optional[str] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
):
    return success_response(user=user_service.get_profile(db, user_id))
