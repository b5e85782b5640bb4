import pytest

from event_api.auth_service.utils import create_token


def test_register_success(client):
    payload = {"name": "A", "email": "a@b.com", "password": "x"}

    response = client.post("/register", json=payload)

    assert response.status_code == 201
    data = response.get_json()
    assert data["id"] == 1
    assert data["name"] == "A"
    assert data["email"] == "a@b.com"
    assert data["failed_attempts"] == 0
    assert data["isLocked"] is False
    assert data["lockUntil"] is None
    assert "password" not in data
    assert "password_hash" not in data


def test_register_duplicate(client):
    payload = {"name": "A", "email": "a@b.com", "password": "x"}
    client.post("/register", json=payload)

    response = client.post("/register", json=payload)

    assert response.status_code == 400
    assert response.get_json() == {"message": "user already exists"}


def test_register_missing_fields(client):
    response = client.post("/register", json={})
    assert response.status_code == 400
    assert response.get_json()["message"] == "name, email and password required"


def test_register_without_json_body(client):
    response = client.post("/register", data="not json")
    assert response.status_code == 400


def test_login_success(client, registered_user):
    response = client.post(
        "/login", json={"email": "alice@example.com", "password": "s3cret-pass"}
    )

    assert response.status_code == 200
    data = response.get_json()
    assert data["message"] == "Login successful"
    assert "token" in data


def test_login_missing_fields(client):
    response = client.post("/login", json={"email": "alice@example.com"})
    assert response.status_code == 400


def test_login_invalid_credentials_same_shape(client, registered_user):
    unknown = client.post("/login", json={"email": "nobody@example.com", "password": "x"})
    wrong = client.post("/login", json={"email": "alice@example.com", "password": "x"})

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.get_json() == wrong.get_json() == {"message": "Invalid credentials"}


def test_login_lockout_flow(client, clock, registered_user):
    bad = {"email": "alice@example.com", "password": "wrong"}
    good = {"email": "alice@example.com", "password": "s3cret-pass"}

    for _ in range(6):
        assert client.post("/login", json=bad).status_code == 401

    locked = client.post("/login", json=good)
    assert locked.status_code == 403
    assert "locked" in locked.get_json()["message"].lower()

    clock.advance(minutes=2, seconds=1)
    response = client.post("/login", json=good)
    assert response.status_code == 200


def test_list_users_requires_token(client):
    response = client.get("/users")
    assert response.status_code == 401
    assert response.get_json() == {"message": "Unauthorized"}


def test_list_users(client, auth_headers):
    client.post("/register", json={"name": "B", "email": "b@example.com", "password": "pw"})

    response = client.get("/users", headers=auth_headers)

    assert response.status_code == 200
    users = response.get_json()
    assert [u["email"] for u in users] == ["alice@example.com", "b@example.com"]
    assert all("password_hash" not in u for u in users)


def test_list_users_reflects_failed_attempts(client, auth_headers):
    client.post("/login", json={"email": "alice@example.com", "password": "wrong"})

    users = client.get("/users", headers=auth_headers).get_json()
    assert users[0]["failed_attempts"] == 1


def test_create_user_endpoint(client, auth_headers):
    payload = {"name": "C", "email": "c@example.com", "password": "pw"}

    response = client.post("/users", json=payload, headers=auth_headers)
    assert response.status_code == 201
    assert response.get_json()["email"] == "c@example.com"

    duplicate = client.post("/users", json=payload, headers=auth_headers)
    assert duplicate.status_code == 400


def test_create_user_requires_token(client):
    response = client.post("/users", json={"name": "C", "email": "c@example.com", "password": "pw"})
    assert response.status_code == 401


@pytest.mark.parametrize("header", [
    "Bearer not.a.token",
    "Token abc",
    "Bearer ",
])
def test_bad_authorization_headers(client, header):
    response = client.get("/users", headers={"Authorization": header})
    assert response.status_code == 401
    assert response.get_json() == {"message": "Unauthorized"}


def test_token_for_deleted_user_is_rejected(client, store, registered_user, auth_headers):
    store.delete_user(registered_user["id"])

    response = client.get("/users", headers=auth_headers)
    assert response.status_code == 401


def test_token_signed_with_other_secret_is_rejected(client, registered_user):
    token = create_token(registered_user["id"], registered_user["email"], "other_secret")
    response = client.get("/users", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.parametrize("payload", [
    {"name": "A", "email": 123, "password": "x"},
    {"name": "A", "email": "a@b.com", "password": 12345},
    {"name": ["A"], "email": "a@b.com", "password": "x"},
])
def test_register_rejects_non_string_fields(client, payload):
    response = client.post("/register", json=payload)
    assert response.status_code == 400
    assert response.get_json()["message"] == "name, email and password must be strings"


@pytest.mark.parametrize("body", [[1, 2], "text", 42])
def test_register_rejects_non_object_body(client, body):
    response = client.post("/register", json=body)
    assert response.status_code == 400


def test_login_rejects_non_string_password(client, registered_user):
    response = client.post("/login", json={"email": "alice@example.com", "password": 12345})

    assert response.status_code == 400
    assert response.get_json()["message"] == "email and password must be strings"


def test_login_rejects_non_object_body(client):
    response = client.post("/login", json=["alice@example.com", "pw"])
    assert response.status_code == 400


@pytest.mark.parametrize("scheme", ["bearer", "BEARER", "Bearer"])
def test_bearer_scheme_is_case_insensitive(client, auth_headers, scheme):
    token = auth_headers["Authorization"].split(" ", 1)[1]

    response = client.get("/users", headers={"Authorization": f"{scheme} {token}"})
    assert response.status_code == 200
