import math

import pytest

from core.exceptions import ValidationError
from services.geosearch import haversine_km, parse_search_params


def test_haversine_one_degree_of_latitude():
    assert haversine_km(12.0, 77.6, 13.0, 77.6) == pytest.approx(111.19, abs=0.01)
    assert haversine_km(12.9, 77.6, 12.9, 77.6) == 0


def test_parse_search_params_defaults_and_errors():
    assert parse_search_params(None, None, None) == (None, None, 10)
    assert parse_search_params("12.9", None, "3") == (None, None, 3)
    assert parse_search_params("12.9", "77.6", "2.5") == (12.9, 77.6, 2.5)

    with pytest.raises(ValidationError):
        parse_search_params("abc", "77.6", None)
    with pytest.raises(ValidationError):
        parse_search_params("12.9", "77.6", "-1")
    with pytest.raises(ValidationError):
        parse_search_params("95", "77.6", None)


def test_nearby_respects_radius_and_orders_by_distance(client, make_shop):
    near = make_shop(latitude=12.92, shop_name="Near")     # ~2.2 km
    middle = make_shop(latitude=12.96, shop_name="Middle")  # ~6.7 km
    make_shop(latitude=13.00, shop_name="Far")              # ~11.1 km

    small = client.get("/api/shops/nearby", params={"latitude": 12.90, "longitude": 77.60, "radius": 5})
    assert small.status_code == 200
    assert [s["shop_id"] for s in small.json()["shops"]] == [near["shop_id"]]
    assert small.json()["count"] == 1

    large = client.get("/api/shops/nearby", params={"latitude": 12.90, "longitude": 77.60, "radius": 10})
    shops = large.json()["shops"]
    assert [s["shop_id"] for s in shops] == [near["shop_id"], middle["shop_id"]]
    assert shops[0]["distance_km"] == pytest.approx(2.22, abs=0.01)
    assert all(s["distance_km"] <= 10 for s in shops)


def test_default_radius_is_ten_km(client, make_shop):
    make_shop(latitude=12.96)
    make_shop(latitude=13.00)

    response = client.get("/api/shops/nearby", params={"latitude": 12.90, "longitude": 77.60})
    assert response.json()["count"] == 1


def test_hidden_and_offline_shops_are_excluded(client, make_shop):
    visible = make_shop(shop_name="Open")
    offline = make_shop(shop_name="Offline")
    hidden = make_shop(shop_name="Hidden")
    client.put("/api/shops/profile", json={"shopId": offline["shop_id"], "isOnline": False})
    client.put("/api/shops/profile", json={"shopId": hidden["shop_id"], "isVisible": False})

    for params in ({"latitude": 12.90, "longitude": 77.60}, {}):
        response = client.get("/api/shops/nearby", params=params)
        assert [s["shop_id"] for s in response.json()["shops"]] == [visible["shop_id"]]


def test_category_filter(client, make_shop):
    grocery = make_shop(categories=["Grocery"])
    make_shop(categories=["Pharmacy"])

    response = client.get("/api/shops/nearby", params={
        "latitude": 12.90, "longitude": 77.60, "category": "Grocery"
    })
    assert [s["shop_id"] for s in response.json()["shops"]] == [grocery["shop_id"]]

    everything = client.get("/api/shops/nearby", params={"category": "All"})
    assert everything.json()["count"] == 2


def test_listing_without_coordinates_orders_by_rating(client, make_shop, make_customer):
    plain = make_shop(shop_name="Plain")
    favourite = make_shop(shop_name="Favourite")
    client.post("/api/ratings", json={
        "shopId": favourite["shop_id"], "userId": make_customer(), "ratingValue": 5
    })

    response = client.get("/api/shops/nearby", params={"latitude": 12.90})
    shops = response.json()["shops"]
    assert [s["shop_id"] for s in shops] == [favourite["shop_id"], plain["shop_id"]]
    assert "distance_km" not in shops[0]


def test_image_is_cover_photo_or_placeholder(client, make_shop):
    with_photos = make_shop(photos=["https://img.example/cover.jpg", "https://img.example/2.jpg"])
    without = make_shop()

    shops = {s["shop_id"]: s for s in client.get("/api/shops/nearby").json()["shops"]}
    assert shops[with_photos["shop_id"]]["image"] == "https://img.example/cover.jpg"
    assert shops[without["shop_id"]]["image"].startswith("https://via.placeholder.com")
    assert isinstance(shops[without["shop_id"]]["categories"], list)


def test_non_numeric_coordinates_are_rejected(client):
    response = client.get("/api/shops/nearby", params={"latitude": "abc", "longitude": "77.6"})
    assert response.status_code == 400
    assert response.json()["success"] is False

    response = client.get("/api/shops/nearby", params={"latitude": "12.9", "longitude": "77.6", "radius": "far"})
    assert response.status_code == 400


def test_shop_at_widest_longitude_of_large_circle_is_found(client, make_shop):
    lat0, lon0, radius_km = 60.0, 10.0, 1000
    # Point 990 km away at the circle's easternmost extent
    r = 990 / 6371.0
    lat = math.degrees(math.asin(math.sin(math.radians(lat0)) / math.cos(r)))
    lon = lon0 + math.degrees(math.asin(math.sin(r) / math.cos(math.radians(lat0))))
    assert haversine_km(lat0, lon0, lat, lon) == pytest.approx(990, abs=0.5)

    shop = make_shop(latitude=lat, longitude=lon)

    response = client.get("/api/shops/nearby", params={
        "latitude": lat0, "longitude": lon0, "radius": radius_km
    })
    assert [s["shop_id"] for s in response.json()["shops"]] == [shop["shop_id"]]


def test_circle_covering_the_pole_keeps_far_side_shops(client, make_shop):
    across_pole = make_shop(latitude=89.0, longitude=180.0)  # ~222 km over the pole

    response = client.get("/api/shops/nearby", params={"latitude": 89.0, "longitude": 0.0, "radius": 300})
    assert [s["shop_id"] for s in response.json()["shops"]] == [across_pole["shop_id"]]
