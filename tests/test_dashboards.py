import json

from models.chat import Conversation, Message
from models.user import User
from services.dashboard import format_days_ago, format_time_ago


def test_time_ago_formatting():
    assert format_time_ago(None) == "Never"
    assert format_time_ago(0) == "Just now"
    assert format_time_ago(5) == "5m ago"
    assert format_time_ago(180) == "3h ago"
    assert format_time_ago(2 * 1440) == "2d ago"

    assert format_days_ago(0) == "Today"
    assert format_days_ago(1) == "Yesterday"
    assert format_days_ago(3) == "3 days ago"
    assert format_days_ago(14) == "2 weeks ago"
    assert format_days_ago(65) == "2 months ago"


def _activity(client, shop, user_id):
    conversation = client.post("/api/chats", json={"shopId": shop["shop_id"], "userId": user_id})
    conversation_id = conversation.json()["conversation_id"]
    client.post("/api/chats/messages", json={
        "conversationId": conversation_id,
        "senderType": "shop",
        "senderId": shop["shop_id"],
        "messageText": "Your order is ready",
    })
    client.post("/api/ratings", json={"shopId": shop["shop_id"], "userId": user_id, "ratingValue": 4})
    return conversation_id


def test_owner_dashboard(client, make_shop, make_customer):
    shop = make_shop()
    user_id = make_customer(full_name="Ravi Kumar")
    _activity(client, shop, user_id)
    client.get(f"/api/shops/{shop['shop_id']}")

    response = client.get("/api/dashboard", params={"shopId": shop["shop_id"]})

    assert response.status_code == 200
    body = response.json()
    assert body["stats"] == {
        "totalChats": 1,
        "averageRating": 4.0,
        "viewsToday": 1,
        "visibilityRadius": 5,
    }
    assert body["recentChats"][0]["user_name"] == "Ravi Kumar"
    assert body["recentRatings"][0]["rating_value"] == 4


def test_owner_dashboard_errors(client):
    assert client.get("/api/dashboard").status_code == 400
    assert client.get("/api/dashboard", params={"shopId": "missing"}).status_code == 404


def test_customer_dashboard(client, make_shop, make_customer):
    shop = make_shop(shop_name="Fresh Mart")
    user_id = make_customer(full_name="Ravi Kumar")
    _activity(client, shop, user_id)

    response = client.get("/api/user/dashboard", params={"userId": user_id})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["name"] == "Ravi Kumar"
    assert data["stats"] == {"totalChats": 1, "totalRatings": 1, "unreadMessages": 1}
    assert data["recentChats"][0]["lastMessage"] == "Your order is ready"
    assert data["recentChats"][0]["timeAgo"] == "Just now"
    assert data["recentRatings"][0]["timeAgo"] == "Today"
    assert data["favoriteShops"][0]["name"] == "Fresh Mart"
    assert data["favoriteShops"][0]["interactions"] == {"chats": 1, "ratings": 1, "total": 2}


def test_customer_dashboard_errors(client, make_customer, database):
    assert client.get("/api/user/dashboard").status_code == 400
    assert client.get("/api/user/dashboard", params={"userId": "missing"}).status_code == 404

    user_id = make_customer()
    with database.session() as db:
        db.get(User, user_id).is_active = False
        db.commit()
    assert client.get("/api/user/dashboard", params={"userId": user_id}).status_code == 403


def test_preferences_are_stored(client, make_customer, database):
    user_id = make_customer()

    response = client.post("/api/user/dashboard", json={"userId": user_id, "preferences": {"theme": "dark"}})

    assert response.status_code == 200
    with database.session() as db:
        assert json.loads(db.get(User, user_id).preferences) == {"theme": "dark"}
    assert client.post("/api/user/dashboard", json={"userId": "missing"}).status_code == 404


def test_clear_chats_and_ratings(client, make_shop, make_customer, database):
    shop = make_shop()
    user_id = make_customer()
    _activity(client, shop, user_id)

    cleared = client.delete("/api/user/dashboard", params={"userId": user_id, "action": "clear-chats"})
    assert cleared.status_code == 200
    with database.session() as db:
        assert db.query(Conversation).count() == 0
        assert db.query(Message).count() == 0

    client.delete("/api/user/dashboard", params={"userId": user_id, "action": "clear-ratings"})
    ratings = client.get("/api/ratings", params={"shopId": shop["shop_id"]}).json()["ratings"]
    assert ratings == []
    profile = client.get("/api/shops/profile", params={"shopId": shop["shop_id"]}).json()["shop"]
    assert profile["average_rating"] == 0
    assert profile["total_ratings"] == 0

    bad = client.delete("/api/user/dashboard", params={"userId": user_id, "action": "clear-everything"})
    assert bad.status_code == 400
