from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.response import success_response
from database.connection import get_db
from schemas.rating import RatingSubmit
from services.rating import RatingService

router = APIRouter()

@router.post("")
def submit_rating(data: RatingSubmit, db: Session = Depends(get_db)):
    """Submit or replace a customer's rating for a shop"""
    RatingService.submit_rating(db=db, data=data)
    return success_response(message="Rating submitted successfully")

@router.get("")
def get_shop_ratings(shop_id: Optional[str] = Query(None, alias="shopId"), db: Session = Depends(get_db)):
    """Get all ratings for a shop, newest first"""
    return success_response(ratings=RatingService.get_shop_ratings(db=db, shop_id=shop_id))
