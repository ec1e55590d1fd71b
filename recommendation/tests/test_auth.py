import uuid
from datetime import timedelta

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from db import get_db
from main import app
from utils.auth_utils import (
    hash_password,
    verify_password,
    create_token,
    create_refresh_token,
    decode_token,
    decode_refresh_token,
)


@pytest.fixture
def client():
    return TestClient(app)


def unique_email():
    return f"student-{uuid.uuid4().hex[:8]}@example.com"


def test_password_hashing():
    hashed = hash_password("s3cret!")

    assert verify_password("s3cret!", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("s3cret!", "not-a-bcrypt-hash")


def test_access_and_refresh_tokens_are_not_interchangeable():
    access = create_token("user-1")
    refresh = create_refresh_token("user-1")

    assert decode_token(access)["sub"] == "user-1"
    assert decode_refresh_token(refresh)["type"] == "refresh"
    with pytest.raises(jwt.InvalidTokenError):
        decode_token(refresh)
    with pytest.raises(jwt.InvalidTokenError):
        decode_refresh_token(access)


def test_expired_token_is_rejected():
    token = create_token("user-1", expires_delta=timedelta(seconds=-5))

    with pytest.raises(jwt.ExpiredSignatureError):
        decode_token(token)


def test_register_login_and_me(client):
    email = unique_email()

    registered = client.post("/auth/register", json={"email": email, "password": "hunter22", "full_name": "Asha"})
    assert registered.status_code == 201
    assert registered.json()["refresh_token"]

    login = client.post("/auth/login", json={"email": email.upper(), "password": "hunter22"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == email
    assert me.json()["role"] == "student"


def test_duplicate_registration_conflicts(client):
    email = unique_email()
    client.post("/auth/register", json={"email": email, "password": "hunter22"})

    response = client.post("/auth/register", json={"email": email, "password": "another1"})

    assert response.status_code == 409


def test_bad_credentials(client):
    email = unique_email()
    client.post("/auth/register", json={"email": email, "password": "hunter22"})

    assert client.post("/auth/login", json={"email": email, "password": "nope"}).status_code == 401
    assert client.post("/auth/login", json={"email": unique_email(), "password": "hunter22"}).status_code == 401


def test_refresh_issues_new_tokens(client):
    tokens = client.post("/auth/register", json={"email": unique_email(), "password": "hunter22"}).json()

    refreshed = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

    assert refreshed.status_code == 200
    assert decode_token(refreshed.json()["access_token"])["type"] == "access"


def test_refresh_rejects_access_tokens(client):
    tokens = client.post("/auth/register", json={"email": unique_email(), "password": "hunter22"}).json()

    response = client.post("/auth/refresh", json={"refresh_token": tokens["access_token"]})

    assert response.status_code == 401


def test_invalid_bearer_token(client):
    response = client.get("/users/me", headers={"Authorization": "Bearer garbage"})

    assert response.status_code == 401


def test_db_dependency_yields_a_session_and_closes_it():
    sessions = get_db()
    db = next(sessions)

    assert isinstance(db, Session)
    with pytest.raises(StopIteration):
        next(sessions)


def test_db_dependency_rolls_back_on_error():
    sessions = get_db()
    next(sessions)

    with pytest.raises(RuntimeError):
        sessions.throw(RuntimeError("boom"))
