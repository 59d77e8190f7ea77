from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from conftest import auth_header
from family_ledger.api.deps import get_db
from family_ledger.core.security import create_access_token
from family_ledger.main import app


def test_unknown_route_uses_envelope(client) -> None:
    resp = client.get("/api/nope")

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Route not found"}


def test_database_failure_is_a_500_without_stack_trace() -> None:
    # No tables: every query fails inside the driver.
    broken = sessionmaker(bind=create_engine("sqlite://", poolclass=StaticPool))

    def override_get_db():
        session = broken()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        client = TestClient(app, raise_server_exceptions=False)
        resp = client.get("/api/transactions", headers=auth_header(create_access_token(1, "member")))
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 500
    body = resp.json()
    assert body["success"] is False
    assert "no such table" in body["message"]
    assert "Traceback" not in body["message"]
    assert "[SQL:" not in body["message"]
    assert "[parameters:" not in body["message"]
