from datetime import timedelta

from shared.auth import create_access_token, decode_token, InvalidToken, get_password_hash, verify_password

import pytest


def test_password_hash_roundtrip():
    hashed = get_password_hash("segredo")
    assert hashed != "segredo"
    assert verify_password("segredo", hashed)
    assert not verify_password("errado", hashed)


def test_verify_password_rejects_unknown_hash_format():
    assert not verify_password("segredo", "plain-text-password")


def test_token_carries_user_and_role():
    token = create_access_token("user-1", "PROFESSOR")
    assert decode_token(token) == {"user_id": "user-1", "role": "PROFESSOR"}


def test_expired_token_is_rejected():
    token = create_access_token("user-1", "ALUNO", expires_delta=timedelta(seconds=-1))
    with pytest.raises(InvalidToken):
        decode_token(token)


def test_register_returns_token_and_user(client):
    response = client.post("/api/auth/register", json={
        "name": "Maria",
        "email": "maria@educonnect.com",
        "password": "secret123",
        "role": "professor",
        "school": "EMEF Centro",
    })
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User registered successfully"
    assert body["token"]
    assert body["user"]["email"] == "maria@educonnect.com"
    assert body["user"]["role"] == "PROFESSOR"
    assert "password" not in body["user"]


def test_register_duplicate_email(client, make_user):
    make_user(email="dup@educonnect.com")
    response = client.post("/api/auth/register", json={
        "name": "Outro", "email": "dup@educonnect.com", "password": "x", "role": "ALUNO",
    })
    assert response.status_code == 400
    assert response.json() == {"error": "Email already exists"}


def test_register_rejects_admin_role(client):
    response = client.post("/api/auth/register", json={
        "name": "Root", "email": "root@educonnect.com", "password": "x", "role": "ADMIN",
    })
    assert response.status_code == 403


def test_register_validation_error_uses_error_envelope(client):
    response = client.post("/api/auth/register", json={"name": "Sem Email", "password": "x", "role": "ALUNO"})
    assert response.status_code == 400
    assert response.json()["error"].startswith("email")


def test_login_and_profile(client, make_user):
    user = make_user(email="joao@educonnect.com", password="pw123456")

    response = client.post("/api/auth/login", json={"email": "joao@educonnect.com", "password": "pw123456"})
    assert response.status_code == 200
    token = response.json()["token"]

    profile = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert profile.status_code == 200
    body = profile.json()
    assert body["id"] == user["id"]
    assert body["stats"] == {"followers": 0, "following": 0, "posts": 0, "projects": None}


def test_login_failures_share_one_message(client, make_user):
    make_user(email="ana@educonnect.com", password="certa123")

    wrong_password = client.post("/api/auth/login", json={"email": "ana@educonnect.com", "password": "errada"})
    unknown_email = client.post("/api/auth/login", json={"email": "ninguem@educonnect.com", "password": "x"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"error": "Invalid credentials"}


def test_profile_requires_token(client):
    assert client.get("/api/auth/profile").status_code == 401
    response = client.get("/api/auth/profile", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


def test_health(client):
    assert client.get("/health").json() == {"status": "OK"}
