import pytest
from fastapi.testclient import TestClient

from database.connection import Database
from main import create_app
from seed_categories import seed_categories
from services.storage import LocalBlobStore


@pytest.fixture
def database():
    database = Database("sqlite://")
    database.create_tables()
    with database.session() as db:
        seed_categories(db)
    yield database
    database.dispose()


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(root=str(tmp_path / "uploads"))


@pytest.fixture
def client(database, blob_store):
    app = create_app(database=database, blob_store=blob_store)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def make_owner(client):
    counter = {"n": 0}

    def _make_owner(phone_number=None, business_name="Corner Store"):
        counter["n"] += 1
        response = client.post("/api/auth/register-owner", json={
            "businessName": business_name,
            "ownerName": "Asha",
            "phoneNumber": phone_number or f"+91900000{counter['n']:04d}",
        })
        assert response.status_code == 201, response.text
        return response.json()["owner_id"]

    return _make_owner


@pytest.fixture
def make_customer(client):
    counter = {"n": 0}

    def _make_customer(phone_number=None, full_name="Ravi Kumar"):
        counter["n"] += 1
        response = client.post("/api/auth/register-user", json={
            "fullName": full_name,
            "phoneNumber": phone_number or f"+91800000{counter['n']:04d}",
        })
        assert response.status_code == 201, response.text
        return response.json()["user_id"]

    return _make_customer


@pytest.fixture
def make_shop(client, make_owner):

    def _make_shop(latitude=12.90, longitude=77.60, categories=("Grocery",), photos=None,
                   shop_name="Fresh Mart", owner_id=None):
        response = client.post("/api/shops/profile", json={
            "ownerId": owner_id or make_owner(),
            "shopName": shop_name,
            "description": "Daily essentials",
            "categories": list(categories),
            "location": {
                "latitude": latitude,
                "longitude": longitude,
                "formattedAddress": "1 MG Road, Bengaluru",
                "city": "Bengaluru",
            },
            "photos": photos or [],
        })
        assert response.status_code == 201, response.text
        return response.json()["shop"]

    return _make_shop
