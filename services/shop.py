from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Any, Dict, List, Optional
from datetime import datetime
import logging
import uuid

from core.config import settings
from core.exceptions import ValidationError, ResourceNotFoundError, StorageError
from database.connection import Database
from database.upsert import build_upsert
from models.category import Category
from models.owner import ShopOwner
from models.shop import Shop, ShopPhoto, ShopView
from schemas.shop import ShopProfileCreate, ShopProfileUpdate, LocationIn, PhotoIn

logger = logging.getLogger(__name__)

# Location fields that may be cleared by an update
_ADDRESS_FIELDS = (
    "formatted_address", "street_address", "locality", "city",
    "state", "country", "postal_code", "plus_code",
)

def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)

def resolve_categories(db: Session, names: List[str]) -> List[Category]:
    """Map category names to rows; unknown names are skipped, not fatal."""
    wanted = list(dict.fromkeys(n for n in names if n))
    if not wanted:
        return []

    rows = db.query(Category).filter(Category.category_name.in_(wanted)).all()
    by_name = {c.category_name: c for c in rows}

    skipped = [n for n in wanted if n not in by_name]
    if skipped:
        logger.warning(f"Skipping unknown categories: {skipped}")

    return [by_name[n] for n in wanted if n in by_name]

def _photo_url(photo) -> str:
    return photo.uri if isinstance(photo, PhotoIn) else photo

def build_photos(shop_id: str, photos: list) -> List[ShopPhoto]:
    return [
        ShopPhoto(photo_id=str(uuid.uuid4()), shop_id=shop_id, photo_url=_photo_url(p), photo_order=i)
        for i, p in enumerate(photos)
    ]

def compose_shop(db: Session, shop: Shop) -> Dict[str, Any]:
    """Shop record with its categories and ordered photos."""
    photos = db.query(ShopPhoto).filter(
        ShopPhoto.shop_id == shop.shop_id
    ).order_by(ShopPhoto.photo_order).all()

    record = shop.to_dict()
    record["photos"] = [{"uri": p.photo_url, "photo_order": p.photo_order} for p in photos]
    return record

def create_profile(db: Session, data: ShopProfileCreate) -> Dict[str, Any]:
    """Create a shop with its categories and photos."""
    if not data.owner_id or not data.shop_name or not data.location or not data.categories:
        raise ValidationError("Missing required fields")

    location = data.location
    if not _is_number(location.latitude) or not _is_number(location.longitude):
        raise ValidationError(
            "Failed to create shop profile",
            details="Coordinates (latitude, longitude) must be valid numbers."
        )

    owner = db.query(ShopOwner).filter(ShopOwner.owner_id == data.owner_id).first()
    if not owner:
        raise ResourceNotFoundError("Shop owner not found")

    shop_id = str(uuid.uuid4())
    shop = Shop(
        shop_id=shop_id,
        owner_id=data.owner_id,
        shop_name=data.shop_name,
        description=data.description,
        latitude=location.latitude,
        longitude=location.longitude,
        visibility_radius_km=data.visibility_radius or settings.DEFAULT_VISIBILITY_RADIUS_KM,
    )
    for field in _ADDRESS_FIELDS:
        setattr(shop, field, getattr(location, field))

    shop.categories = resolve_categories(db, data.categories)
    shop.photos = build_photos(shop_id, data.photos or [])

    db.add(shop)
    db.commit()
    logger.info(f"Shop created: {shop_id} for owner {data.owner_id}")

    created = db.query(Shop).filter(Shop.shop_id == shop_id).first()
    if created is None:
        raise StorageError("Shop created but failed to fetch details")
    return compose_shop(db, created)

def update_profile(db: Session, data: ShopProfileUpdate) -> Dict[str, Any]:
    """Overwrite a shop's profile.

    Every optional text field is written as sent, so fields the caller omits
    are cleared. Required columns (name, coordinates, radius, flags) keep their
    current value when omitted. Categories and photos are replaced wholesale
    when present.
    """
    if not data.shop_id:
        raise ValidationError("Shop ID is required")

    shop = db.query(Shop).filter(Shop.shop_id == data.shop_id).first()
    if not shop:
        raise ResourceNotFoundError("Shop not found")

    location = data.location or LocationIn()

    if data.shop_name:
        shop.shop_name = data.shop_name
    shop.description = data.description
    if _is_number(location.latitude) and _is_number(location.longitude):
        shop.latitude = location.latitude
        shop.longitude = location.longitude
    for field in _ADDRESS_FIELDS:
        setattr(shop, field, getattr(location, field))
    if data.visibility_radius is not None:
        shop.visibility_radius_km = data.visibility_radius
    if data.is_visible is not None:
        shop.is_visible = data.is_visible
    if data.is_online is not None:
        shop.is_online = data.is_online
    shop.updated_at = datetime.utcnow()

    if data.categories is not None:
        shop.categories = resolve_categories(db, data.categories)

    if data.photos is not None:
        # Delete every existing photo before inserting the replacements
        db.query(ShopPhoto).filter(ShopPhoto.shop_id == shop.shop_id).delete(synchronize_session=False)
        db.expire(shop, ["photos"])
        db.add_all(build_photos(shop.shop_id, data.photos))

    db.commit()
    logger.info(f"Shop updated: {shop.shop_id}")

    db.refresh(shop)
    return compose_shop(db, shop)

def get_profile(db: Session, owner_id: Optional[str] = None, shop_id: Optional[str] = None) -> Dict[str, Any]:
    """Look a shop up by id, or by owner when no id is given."""
    if not owner_id and not shop_id:
        raise ValidationError("Owner ID or Shop ID is required")

    query = db.query(Shop)
    if shop_id:
        query = query.filter(Shop.shop_id == shop_id)
    else:
        query = query.filter(Shop.owner_id == owner_id).order_by(Shop.created_at)

    shop = query.first()
    if not shop:
        raise ResourceNotFoundError("Shop not found")
    return compose_shop(db, shop)

def get_shop_details(db: Session, shop_id: str) -> Dict[str, Any]:
    shop = db.query(Shop).filter(Shop.shop_id == shop_id).first()
    if not shop:
        logger.info(f"Shop not found: {shop_id}")
        raise ResourceNotFoundError("Shop not found")

    record = compose_shop(db, shop)
    logger.info(f"Shop details loaded: {shop_id} ({len(record['photos'])} photos)")
    return record

def record_shop_view(database: Database, shop_id: str) -> None:
    """Best-effort view counter bump; failures are logged and dropped."""
    try:
        with database.session() as db:
            updated = db.query(Shop).filter(Shop.shop_id == shop_id).update(
                {Shop.total_views: Shop.total_views + 1},
                synchronize_session=False
            )
            if updated:
                db.execute(build_upsert(
                    db,
                    ShopView,
                    {"shop_id": shop_id, "view_date": datetime.utcnow().date(), "view_count": 1},
                    conflict_columns=("shop_id", "view_date"),
                    update_expressions={"view_count": ShopView.view_count + 1},
                ))
            db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Failed to increment view count for shop {shop_id}: {str(e)}")

def list_categories(db: Session) -> List[Dict[str, Any]]:
    categories = db.query(Category).filter(
        Category.is_active == True
    ).order_by(Category.display_order, Category.category_name).all()
    return [c.to_dict() for c in categories]
