from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from core.response import success_response
from database.connection import get_db
from services.dashboard import owner_dashboard

router = APIRouter()

@router.get("")
def get_owner_dashboard(
    shop_id: Optional[str] = Query(None, alias="shopId"),
    db: Session = Depends(get_db)
):
    """Stats, recent chats and recent ratings for a shop owner"""
    return success_response(**owner_dashboard(db, shop_id))
