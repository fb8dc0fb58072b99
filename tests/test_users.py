from conftest import PASSWORD, auth, register

from quizhub.services.users import UserService


def test_register_returns_token_and_camel_case_user(client):
    data = register(client, "bob")
    assert data["token"]
    assert data["tokenType"] == "bearer"
    assert data["user"]["username"] == "bob"
    assert data["user"]["isAdmin"] is False
    assert data["user"]["examCountdowns"] == []
    assert "hashedPassword" not in data["user"]


def test_register_duplicates_and_bad_input(client):
    register(client, "bob")
    again = client.post(
        "/api/users/register",
        json={"username": "BOB", "email": "other@example.com", "password": PASSWORD},
    )
    assert again.status_code == 400
    assert again.json()["error"]["code"] == "DUPLICATE_ERROR"

    same_email = client.post(
        "/api/users/register",
        json={"username": "bobby", "email": "Bob@Example.com", "password": PASSWORD},
    )
    assert same_email.status_code == 400

    short = client.post(
        "/api/users/register",
        json={"username": "bo", "email": "bo@example.com", "password": "123"},
    )
    assert short.status_code == 400
    body = short.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"


def test_unique_index_conflict_is_a_duplicate(client, monkeypatch):
    register(client, "bob")
    monkeypatch.setattr(UserService, "_ensure_unique", staticmethod(lambda *args, **kwargs: None))

    again = client.post(
        "/api/users/register",
        json={"username": "bob", "email": "bob.com", "password": PASSWORD},
    )
    assert again.status_code == 400
    assert again.json()["error"]["code"] == "DUPLICATE_ERROR"

    carol = register(client, "carol")
    taken = client.put(
        "/api/users/profile", json={"username": "bob"}, headers=auth(carol["token"])
    )
    assert taken.status_code == 400
    assert taken.json()["error"]["code"] == "DUPLICATE_ERROR"
    assert client.get("/api/users/profile", headers=auth(carol["token"])).json()["data"]["username"] == "carol"


def test_login_by_username_or_email(client):
    register(client, "bob")
    by_name = client.post("/api/users/login", json={"username": "bob", "password": PASSWORD})
    assert by_name.status_code == 200
    by_email = client.post("/api/users/login", json={"username": "BOB@example.com", "password": PASSWORD})
    assert by_email.status_code == 200
    assert by_email.json()["data"]["user"]["id"] == by_name.json()["data"]["user"]["id"]

    wrong = client.post("/api/users/login", json={"username": "bob", "password": "nope-nope"})
    assert wrong.status_code == 401
    assert wrong.json()["success"] is False


def test_profile_requires_token(client):
    response = client.get("/api/users/profile")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_profile_update_with_exam_countdowns(client, user):
    countdowns = [{"id": "c1", "examType": "CCNA", "examCode": "200-301", "examDate": "2026-12-01"}]
    response = client.put(
        "/api/users/profile",
        json={"examCountdowns": countdowns, "email": "Alice.New@Example.com"},
        headers=user["headers"],
    )
    assert response.status_code == 200, response.text
    updated = response.json()["data"]
    assert updated["email"] == "alice.new@example.com"
    assert updated["examCountdowns"] == countdowns

    profile = client.get("/api/users/profile", headers=user["headers"]).json()["data"]
    assert profile["examCountdowns"] == countdowns
    assert profile["activePurchases"] == []


def test_password_change(client, user):
    client.put("/api/users/profile", json={"password": "brand-new-pw"}, headers=user["headers"])
    old = client.post("/api/users/login", json={"username": "alice", "password": PASSWORD})
    assert old.status_code == 401
    new = client.post("/api/users/login", json={"username": "alice", "password": "brand-new-pw"})
    assert new.status_code == 200


def test_profile_update_rejects_taken_username(client, user):
    register(client, "bob")
    response = client.put("/api/users/profile", json={"username": "bob"}, headers=user["headers"])
    assert response.status_code == 400


def test_admin_user_management(client, admin, user):
    listing = client.get("/api/users", headers=admin["headers"]).json()["data"]
    assert listing["total"] == 2
    assert {u["username"] for u in listing["items"]} == {"admin", "alice"}

    found = client.get("/api/users", params={"search": "ali"}, headers=admin["headers"]).json()["data"]
    assert [u["id"] for u in found["items"]] == [user["id"]]

    promoted = client.put(f"/api/users/{user['id']}", json={"isAdmin": True}, headers=admin["headers"])
    assert promoted.json()["data"]["isAdmin"] is True
    assert client.get(f"/api/users/{user['id']}", headers=admin["headers"]).json()["data"]["isAdmin"] is True

    assert client.get("/api/users/missing", headers=admin["headers"]).status_code == 404


def test_user_admin_routes_forbidden_for_users(client, user):
    assert client.get("/api/users", headers=user["headers"]).status_code == 403
    response = client.put(f"/api/users/{user['id']}", json={"isAdmin": True}, headers=user["headers"])
    assert response.status_code == 403

    login = client.post("/api/users/login", json={"username": "alice", "password": PASSWORD}).json()["data"]
    assert login["user"]["isAdmin"] is False
    assert client.get("/api/users/profile", headers=auth(login["token"])).status_code == 200
