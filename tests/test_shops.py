from datetime import datetime

from sqlalchemy.exc import OperationalError

from models.shop import Shop, ShopPhoto, ShopView
from services.shop import record_shop_view


def test_create_profile_returns_composed_record(client, make_owner):
    owner_id = make_owner(business_name="Corner Store")
    response = client.post("/api/shops/profile", json={
        "ownerId": owner_id,
        "shopName": "Fresh Mart",
        "categories": ["Grocery", "Bakery"],
        "location": {"latitude": 12.9, "longitude": 77.6, "city": "Bengaluru"},
        "photos": [{"uri": "https://img.example/a.jpg"}, "https://img.example/b.jpg"],
    })

    assert response.status_code == 201
    body = response.json()
    shop = body["shop"]
    assert body["shop_id"] == shop["shop_id"]
    assert shop["business_name"] == "Corner Store"
    assert shop["visibility_radius_km"] == 5
    assert shop["is_visible"] is True and shop["is_online"] is True
    assert sorted(shop["categories"]) == ["Bakery", "Grocery"]
    assert shop["photos"] == [
        {"uri": "https://img.example/a.jpg", "photo_order": 0},
        {"uri": "https://img.example/b.jpg", "photo_order": 1},
    ]


def test_create_profile_skips_unknown_categories(make_shop, database):
    shop = make_shop(categories=["Grocery", "Spaceships", "Bakery", "Books"])
    assert sorted(shop["categories"]) == ["Bakery", "Books", "Grocery"]

    with database.session() as db:
        stored = db.get(Shop, shop["shop_id"])
        assert sorted(stored.category_names) == ["Bakery", "Books", "Grocery"]


def test_create_profile_requires_categories(client, make_owner):
    response = client.post("/api/shops/profile", json={
        "ownerId": make_owner(),
        "shopName": "Fresh Mart",
        "categories": [],
        "location": {"latitude": 12.9, "longitude": 77.6},
    })
    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields"


def test_create_profile_rejects_non_numeric_coordinates(client, make_owner):
    response = client.post("/api/shops/profile", json={
        "ownerId": make_owner(),
        "shopName": "Fresh Mart",
        "categories": ["Grocery"],
        "location": {"latitude": "north", "longitude": 77.6},
    })
    assert response.status_code == 400


def test_create_profile_unknown_owner(client):
    response = client.post("/api/shops/profile", json={
        "ownerId": "missing-owner",
        "shopName": "Fresh Mart",
        "categories": ["Grocery"],
        "location": {"latitude": 12.9, "longitude": 77.6},
    })
    assert response.status_code == 404


def test_photo_replacement_is_total(client, make_shop, database):
    shop = make_shop()
    shop_id = shop["shop_id"]
    base = {
        "shopId": shop_id,
        "shopName": "Fresh Mart",
        "categories": ["Grocery"],
        "location": {"latitude": 12.9, "longitude": 77.6},
    }

    first = client.put("/api/shops/profile", json={**base, "photos": ["A", "B"]})
    assert first.status_code == 200
    assert [p["uri"] for p in first.json()["shop"]["photos"]] == ["A", "B"]

    second = client.put("/api/shops/profile", json={**base, "photos": ["C"]})
    assert second.json()["shop"]["photos"] == [{"uri": "C", "photo_order": 0}]

    with database.session() as db:
        assert db.query(ShopPhoto).filter_by(shop_id=shop_id).count() == 1


def test_update_replaces_categories_and_clears_omitted_text(client, make_shop):
    shop = make_shop(categories=["Grocery"])
    assert shop["description"] == "Daily essentials"

    response = client.put("/api/shops/profile", json={
        "shopId": shop["shop_id"],
        "categories": ["Pharmacy", "Books"],
        "isOnline": False,
    })

    updated = response.json()["shop"]
    assert response.status_code == 200
    assert sorted(updated["categories"]) == ["Books", "Pharmacy"]
    assert updated["description"] is None
    assert updated["city"] is None
    # Required columns keep their values when omitted
    assert updated["shop_name"] == "Fresh Mart"
    assert updated["latitude"] == 12.90
    assert updated["is_online"] is False
    assert updated["is_visible"] is True


def test_update_requires_shop_id(client):
    response = client.put("/api/shops/profile", json={"shopName": "Nothing"})
    assert response.status_code == 400


def test_update_unknown_shop(client):
    response = client.put("/api/shops/profile", json={"shopId": "missing", "shopName": "Nothing"})
    assert response.status_code == 404


def test_get_profile_by_owner_or_shop(client, make_owner, make_shop):
    owner_id = make_owner()
    shop = make_shop(owner_id=owner_id)

    by_owner = client.get("/api/shops/profile", params={"ownerId": owner_id})
    by_shop = client.get("/api/shops/profile", params={"shopId": shop["shop_id"]})

    assert by_owner.json()["shop"]["shop_id"] == shop["shop_id"]
    assert by_shop.json()["shop"]["shop_id"] == shop["shop_id"]
    assert client.get("/api/shops/profile").status_code == 400
    assert client.get("/api/shops/profile", params={"ownerId": "nobody"}).status_code == 404


def test_get_shop_by_id_counts_views(client, make_shop, database):
    shop = make_shop(photos=["https://img.example/a.jpg"])

    for _ in range(2):
        response = client.get(f"/api/shops/{shop['shop_id']}")
        assert response.status_code == 200
        assert response.json()["shop"]["photos"][0]["uri"] == "https://img.example/a.jpg"

    with database.session() as db:
        assert db.get(Shop, shop["shop_id"]).total_views == 2
        bucket = db.query(ShopView).filter_by(
            shop_id=shop["shop_id"], view_date=datetime.utcnow().date()
        ).one()
        assert bucket.view_count == 2


def test_get_unknown_shop(client):
    assert client.get("/api/shops/does-not-exist").status_code == 404


def test_record_shop_view_swallows_storage_errors(database, monkeypatch, caplog):

    def broken_session():
        raise OperationalError("UPDATE shops", {}, Exception("database is locked"))

    monkeypatch.setattr(database, "session", broken_session)

    record_shop_view(database, "any-shop")

    assert "Failed to increment view count" in caplog.text


def test_list_categories_in_display_order(client):
    response = client.get("/api/categories")

    names = [c["category_name"] for c in response.json()["categories"]]
    assert names[0] == "Grocery"
    assert "Pharmacy" in names
