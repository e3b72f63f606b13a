from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from core.response import success_response
from database.connection import Database, get_database, get_db
from schemas.shop import ShopProfileCreate, ShopProfileUpdate
from services import geosearch
from services.shop import (
    create_profile,
    update_profile,
    get_profile,
    get_shop_details,
    record_shop_view
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Query values stay strings so bad numbers surface as 400, not framework 422s
@router.get("/nearby")
def get_nearby_shops(
    latitude: Optional[str] = None,
    longitude: Optional[str] = None,
    radius: Optional[str] = None,
    category: Optional[str] = geosearch.ALL_CATEGORIES,
    db: Session = Depends(get_db)
):
    """
    Discoverable shops near a point, or all of them ranked by rating
    when no coordinates are given
    """
    shops = geosearch.search_shops(db, latitude, longitude, radius, category)
    return success_response(shops=shops, count=len(shops))

@router.post("/profile", status_code=status.HTTP_201_CREATED)
def create_shop_profile(data: ShopProfileCreate, db: Session = Depends(get_db)):
    shop = create_profile(db, data)
    return success_response(
        message="Shop profile created successfully",
        shop_id=shop["shop_id"],
        shop=shop
    )

@router.put("/profile")
def update_shop_profile(data: ShopProfileUpdate, db: Session = Depends(get_db)):
    shop = update_profile(db, data)
    return success_response(message="Shop profile updated successfully", shop=shop)

@router.get("/profile")
def get_shop_profile(
    owner_id: Optional[str] = Query(None, alias="ownerId"),
    shop_id: Optional[str] = Query(None, alias="shopId"),
    db: Session = Depends(get_db)
):
    """Shop profile by shopId, or the owner's first shop by ownerId"""
    return success_response(shop=get_profile(db, owner_id=owner_id, shop_id=shop_id))

@router.get("/{shop_id}")
def get_shop(
    shop_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    database: Database = Depends(get_database)
):
    """
    Public shop page. The view counter is bumped after the response
    is sent and never fails the request
    """
    shop = get_shop_details(db, shop_id)
    background_tasks.add_task(record_shop_view, database, shop_id)
    return success_response(shop=shop)
