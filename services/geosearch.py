"""
Nearby-shop search.

With coordinates, shops are filtered by great-circle distance from the query
point; without them, every discoverable shop is listed by rating. Both paths
only ever return shops that are visible *and* online.
"""
import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from core.config import settings
from core.exceptions import ValidationError
from models.category import Category
from models.shop import Shop, ShopPhoto

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
ALL_CATEGORIES = "All"


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def _parse_number(value: str, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a valid number", field=name)
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be a valid number", field=name)
    return number


def parse_search_params(
    latitude: Optional[str],
    longitude: Optional[str],
    radius: Optional[str],
) -> Tuple[Optional[float], Optional[float], float]:
    """Turn raw query strings into (lat, lon, radius_km).

    Coordinates come back as None unless both were supplied.
    """
    radius_km = settings.DEFAULT_SEARCH_RADIUS_KM
    if radius not in (None, ""):
        radius_km = _parse_number(radius, "radius")
        if radius_km <= 0:
            raise ValidationError("radius must be greater than zero", field="radius")

    if latitude in (None, "") or longitude in (None, ""):
        return None, None, radius_km

    lat = _parse_number(latitude, "latitude")
    lon = _parse_number(longitude, "longitude")
    if not -90 <= lat <= 90 or not -180 <= lon <= 180:
        raise ValidationError("Latitude and longitude are out of range")
    return lat, lon, radius_km


def _discoverable(db: Session, category: Optional[str]):
    query = db.query(Shop).options(
        selectinload(Shop.categories),
        selectinload(Shop.owner)
    ).filter(
        Shop.is_visible == True,
        Shop.is_online == True
    )
    if category and category != ALL_CATEGORIES:
        query = query.filter(Shop.categories.any(Category.category_name == category))
    return query


def find_nearby_shops(
    db: Session,
    latitude: float,
    longitude: float,
    radius_km: float,
    category: Optional[str] = ALL_CATEGORIES,
) -> List[Tuple[Shop, float]]:
    """Discoverable shops within radius_km, nearest first."""
    query = _discoverable(db, category)

    # Bounding box prefilter so the distance pass only sees nearby rows
    angular_radius = radius_km / EARTH_RADIUS_KM
    lat_delta = math.degrees(angular_radius)
    query = query.filter(Shop.latitude.between(latitude - lat_delta, latitude + lat_delta))

    # Widest longitude span of the circle; it covers a pole when the ratio reaches 1
    cos_lat = math.cos(math.radians(latitude))
    if cos_lat > 0 and math.sin(angular_radius) < cos_lat:
        lon_delta = math.degrees(math.asin(math.sin(angular_radius) / cos_lat))
        # Boxes crossing the antimeridian fall back to the distance check alone
        if longitude - lon_delta >= -180 and longitude + lon_delta <= 180:
            query = query.filter(Shop.longitude.between(longitude - lon_delta, longitude + lon_delta))

    matches = []
    for shop in query.all():
        distance = haversine_km(latitude, longitude, shop.latitude, shop.longitude)
        if distance <= radius_km:
            matches.append((shop, distance))

    matches.sort(key=lambda item: item[1])
    return matches


def list_discoverable_shops(db: Session, category: Optional[str] = ALL_CATEGORIES) -> List[Shop]:
    return _discoverable(db, category).order_by(
        Shop.average_rating.desc(),
        Shop.created_at.desc()
    ).all()


def _cover_photos(db: Session, shop_ids: List[str]) -> Dict[str, str]:
    """Lowest-order photo URL per shop."""
    if not shop_ids:
        return {}

    photos = db.query(ShopPhoto).filter(
        ShopPhoto.shop_id.in_(shop_ids)
    ).order_by(ShopPhoto.shop_id, ShopPhoto.photo_order).all()

    covers = {}
    for photo in photos:
        covers.setdefault(photo.shop_id, photo.photo_url)
    return covers


def search_shops(
    db: Session,
    latitude: Optional[str] = None,
    longitude: Optional[str] = None,
    radius: Optional[str] = None,
    category: Optional[str] = ALL_CATEGORIES,
) -> List[Dict[str, Any]]:
    """Search discoverable shops, by distance when both coordinates are given."""
    lat, lon, radius_km = parse_search_params(latitude, longitude, radius)
    category = category or ALL_CATEGORIES

    if lat is not None:
        ranked = find_nearby_shops(db, lat, lon, radius_km, category)
        logger.info(f"Nearby search ({lat}, {lon}) r={radius_km}km category={category}: {len(ranked)} shops")
    else:
        ranked = [(shop, None) for shop in list_discoverable_shops(db, category)]
        logger.info(f"Listing search category={category}: {len(ranked)} shops")

    covers = _cover_photos(db, [shop.shop_id for shop, _ in ranked])

    results = []
    for shop, distance in ranked:
        record = shop.to_dict()
        record["image"] = covers.get(shop.shop_id, settings.PLACEHOLDER_IMAGE_URL)
        if distance is not None:
            record["distance_km"] = round(distance, 2)
        results.append(record)
    return results
