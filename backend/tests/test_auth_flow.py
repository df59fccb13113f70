from __future__ import annotations

import datetime as dt

import pytest

from watched.core.exceptions import BadRequestError
from watched.core.security import create_access_token
from watched.models.refresh_token import RefreshToken
from watched.models.user import User
from watched.schemas.user import SignupRequest
from watched.services import users as users_service

SIGNUP = {
    "username": "alice",
    "password": "wonderland1",
    "fullName": "Alice Liddell",
    "email": "alice@example.com",
    "phoneNumber": "555-0100",
    "address": "1 Rabbit Hole",
}


def _login(client, username: str, password: str):
    return client.post("/api/users/login", json={"username": username, "password": password})


def test_signup_then_duplicate_is_rejected(client) -> None:
    first = client.post("/api/users/signup", json=SIGNUP)
    assert first.status_code == 200, first.text
    body = first.json()
    assert body["username"] == "alice"
    assert body["fullName"] == "Alice Liddell"
    assert "password" not in body and "passwordHash" not in body

    second = client.post("/api/users/signup", json=SIGNUP)
    assert second.status_code == 400
    assert second.json()["message"] == "User already exists!"


def test_duplicate_signup_is_stopped_by_unique_constraint(db_session, monkeypatch) -> None:
    users_service.register_user(db_session, SignupRequest.model_validate(SIGNUP))
    monkeypatch.setattr(users_service, "find_user_by_username", lambda *args: None)

    with pytest.raises(BadRequestError) as excinfo:
        users_service.register_user(db_session, SignupRequest.model_validate(SIGNUP))

    assert excinfo.value.message == "User already exists!"
    assert db_session.query(User).count() == 1
    other = users_service.register_user(db_session, SignupRequest.model_validate({**SIGNUP, "username": "bob"}))
    assert other.id is not None
    assert db_session.query(User).count() == 2


def test_signup_requires_every_field(client) -> None:
    response = client.post("/api/users/signup", json={**SIGNUP, "address": "   "})
    assert response.status_code == 400
    assert response.json()["message"] == "All fields are required!"


def test_signup_accepts_password_hash_field_name(client) -> None:
    payload = {key: value for key, value in SIGNUP.items() if key != "password"}
    payload["passwordHash"] = "wonderland1"
    assert client.post("/api/users/signup", json=payload).status_code == 200
    assert _login(client, "alice", "wonderland1").status_code == 200


def test_login_returns_tokens_and_identity(client, make_user) -> None:
    user = make_user("alice")
    response = _login(client, "alice", "password123")
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["userId"] == user.id
    assert body["username"] == "alice"
    assert body["accessToken"] and body["refreshToken"]


def test_login_validation_and_bad_credentials(client, make_user) -> None:
    make_user("alice")
    missing = client.post("/api/users/login", json={"username": "alice"})
    assert missing.status_code == 400
    assert missing.json()["message"] == "Username and password are required!"

    assert _login(client, "alice", "wrong-password").status_code == 401
    assert _login(client, "nobody", "password123").status_code == 401


def test_refresh_returns_new_access_token_and_same_refresh_token(client, make_user) -> None:
    user = make_user("alice")
    tokens = _login(client, "alice", "password123").json()

    response = client.post("/api/users/refresh", json={"userId": user.id, "token": tokens["refreshToken"]})
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["refreshToken"] == tokens["refreshToken"]
    assert body["accessToken"]


def test_second_login_invalidates_first_refresh_token(client, make_user, db_session) -> None:
    user = make_user("alice")
    first = _login(client, "alice", "password123").json()
    second = _login(client, "alice", "password123").json()
    assert first["refreshToken"] != second["refreshToken"]

    stale = client.post("/api/users/refresh", json={"userId": user.id, "token": first["refreshToken"]})
    assert stale.status_code == 401
    assert stale.json()["message"] == "Refresh token expired. Please log in again."

    fresh = client.post("/api/users/refresh", json={"userId": user.id, "token": second["refreshToken"]})
    assert fresh.status_code == 200

    db_session.expire_all()
    assert db_session.query(RefreshToken).filter(RefreshToken.user_id == user.id).count() == 1


def test_refresh_rejects_non_ascii_token(client, make_user) -> None:
    user = make_user("alice")
    _login(client, "alice", "password123")

    response = client.post("/api/users/refresh", json={"userId": user.id, "token": "café-token"})
    assert response.status_code == 401
    assert response.json()["message"] == "Refresh token expired. Please log in again."


def test_refresh_rejects_expired_token(client, make_user, db_session) -> None:
    user = make_user("alice")
    tokens = _login(client, "alice", "password123").json()
    row = db_session.query(RefreshToken).filter(RefreshToken.user_id == user.id).one()
    row.expires_at = dt.datetime.now(dt.timezone.utc) - dt.timedelta(seconds=1)
    db_session.commit()

    response = client.post("/api/users/refresh", json={"userId": user.id, "token": tokens["refreshToken"]})
    assert response.status_code == 401


def test_refresh_requires_user_id_and_token(client) -> None:
    response = client.post("/api/users/refresh", json={"userId": 0, "token": ""})
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request body! User ID and token are required."


def test_guest_login_creates_ordinary_user(client, db_session) -> None:
    response = client.post("/api/users/guest")
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["username"].startswith("Guest")
    assert len(body["username"]) == len("Guest") + 8

    guest = db_session.get(User, body["userId"])
    assert guest is not None
    assert not guest.is_admin

    refreshed = client.post("/api/users/refresh", json={"userId": body["userId"], "token": body["refreshToken"]})
    assert refreshed.status_code == 200


def test_check_jwt_valid_echoes_token_identity(client, make_user, auth_header) -> None:
    user = make_user("alice")
    response = client.post("/api/users/checkJwtValid", headers=auth_header(user))
    assert response.status_code == 200
    assert response.json() == {"message": "JWT is still valid", "user": {"userId": user.id, "username": "alice"}}


def test_check_jwt_valid_rejects_missing_and_expired_tokens(client, make_user) -> None:
    user = make_user("alice")
    assert client.post("/api/users/checkJwtValid").status_code == 401

    issued = dt.datetime.now(dt.timezone.utc) - dt.timedelta(minutes=20)
    expired = create_access_token(user.id, user.username, now=issued)
    response = client.post("/api/users/checkJwtValid", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401
    assert response.json()["error_code"] == "EXPIRED_TOKEN"
