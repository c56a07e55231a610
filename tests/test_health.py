"""Health endpoint tests."""
import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client():
    from brandportal.backend.main import app
    return TestClient(app)


def test_health(client: TestClient):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"
    assert r.headers.get("X-Trace-Id")


def test_ready_checks_database(client: TestClient):
    from sqlalchemy.orm import sessionmaker

    from brandportal.backend.database import get_test_engine
    from brandportal.backend.deps import get_db
    from brandportal.backend.main import app

    db = sessionmaker(bind=get_test_engine())()

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        r = client.get("/ready")
    finally:
        app.dependency_overrides.pop(get_db, None)
        db.close()
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
