from __future__ import annotations

import os

# Settings are read at import time, so point them at SQLite before the app loads.
os.environ.setdefault("FAMLEDGER_DB_URL", "sqlite://")
os.environ.setdefault("FAMLEDGER_JWT_SECRET", "test-secret")
os.environ.setdefault("FAMLEDGER_SEED_DEFAULT_CATEGORIES", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from family_ledger.api.deps import get_db
from family_ledger.main import app
from family_ledger.models.base import Base
from family_ledger.models import category, transaction, user  # noqa: F401


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture()
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # No context manager: startup hooks would touch the real engine.
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client: TestClient, username: str = "alice", role: str | None = None, token: str | None = None, **extra) -> dict:
    payload = {
        "name": extra.pop("name", username.title()),
        "username": username,
        "email": extra.pop("email", f"{username}@example.com"),
        "password": extra.pop("password", "s3cret-pass"),
    }
    if role is not None:
        payload["role"] = role
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    resp = client.post("/api/auth/register", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin(client) -> dict:
    return register(client, "admin", role="admin")


@pytest.fixture()
def admin_headers(admin) -> dict[str, str]:
    return auth_header(admin["accessToken"])
