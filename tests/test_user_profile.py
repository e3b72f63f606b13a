def test_update_profile_trims_and_blanks_email(client, make_customer):
    user_id = make_customer(phone_number="+918000000001")

    response = client.put("/api/user/update-profile", json={
        "userId": user_id,
        "fullName": "  Ravi K  ",
        "email": "   ",
    })

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["id"] == user_id
    assert user["name"] == "Ravi K"
    assert user["email"] == ""
    assert user["phoneNumber"] == "+918000000001"

    fetched = client.get("/api/user/update-profile", params={"userId": user_id}).json()["user"]
    assert fetched["name"] == "Ravi K"


def test_update_profile_validation(client, make_customer):
    user_id = make_customer()

    assert client.put("/api/user/update-profile", json={"fullName": "Ravi"}).status_code == 400
    assert client.put("/api/user/update-profile", json={"userId": user_id, "fullName": "  "}).status_code == 400

    bad_email = client.put("/api/user/update-profile", json={
        "userId": user_id, "fullName": "Ravi", "email": "not-an-email"
    })
    assert bad_email.status_code == 400
    assert bad_email.json()["error"] == "Invalid email format"

    missing = client.put("/api/user/update-profile", json={"userId": "missing", "fullName": "Ravi"})
    assert missing.status_code == 404


def test_get_profile_unknown_user(client):
    assert client.get("/api/user/update-profile", params={"userId": "missing"}).status_code == 404
