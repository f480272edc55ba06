import asyncio
import itertools
import os
import tempfile

TEST_DIR = tempfile.mkdtemp(prefix="educonnect-tests-")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(TEST_DIR, "test_educonnect.db")
os.environ["UPLOAD_DIR"] = os.path.join(TEST_DIR, "uploads")
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from main import app
from shared.auth import get_password_hash
from shared.db import engine, Base, SessionLocal
from services.user_management.models.users import User, UserRole

ADMIN_EMAIL = "admin@educonnect.com"
ADMIN_PASSWORD = "admin123"


async def _reset_database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def _insert_admin():
    async with SessionLocal() as db:
        db.add(User(
            email=ADMIN_EMAIL,
            password=get_password_hash(ADMIN_PASSWORD),
            name="Administrador",
            role=UserRole.ADMIN,
            verified=True,
        ))
        await db.commit()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client():
    asyncio.run(_reset_database())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(client):
    """Register a user through the API and return its id, token and auth headers."""
    counter = itertools.count(1)

    def _make(role="ALUNO", name=None, email=None, password="secret123", **extra):
        n = next(counter)
        payload = {
            "name": name or f"Usuario {n}",
            "email": email or f"usuario{n}@educonnect.com",
            "password": password,
            "role": role,
            **extra,
        }
        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 201, response.text
        body = response.json()
        return {
            "id": body["user"]["id"],
            "email": payload["email"],
            "token": body["token"],
            "headers": bearer(body["token"]),
        }

    return _make


@pytest.fixture
def admin(client):
    asyncio.run(_insert_admin())
    response = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200, response.text
    body = response.json()
    return {"id": body["user"]["id"], "token": body["token"], "headers": bearer(body["token"])}


@pytest.fixture
def make_post(client):
    def _make(author, content="Olá rede #educacao", **extra):
        response = client.post("/api/posts", json={"content": content, **extra}, headers=author["headers"])
        assert response.status_code == 201, response.text
        return response.json()

    return _make
