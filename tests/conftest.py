# tests/conftest.py
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jobassist.core.config import settings
from jobassist.db.session import get_db, init_db
from jobassist.main import app
from jobassist.services import cv_cache, llm_adapter


@pytest.fixture
def engine():
    # one shared in-memory connection so every session sees the same tables
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def SessionTesting(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db_session(SessionTesting):
    db = SessionTesting()
    yield db
    db.close()


@pytest.fixture(autouse=True)
def override_get_db(SessionTesting):
    def _get_db():
        db = SessionTesting()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def isolated_services(monkeypatch, tmp_path):
    """Mock LLM adapter, fresh memory CV cache and a per-test upload dir."""
    monkeypatch.setattr(settings, "LLM_ADAPTER", "mock")
    monkeypatch.setattr(settings, "CV_CACHE_BACKEND", "memory")
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(cv_cache, "_cache", None)
    llm_adapter.reset_adapter()
    yield
    llm_adapter.reset_adapter()


@pytest.fixture
def client():
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")


@pytest.fixture
def register():
    """Sign a user up; returns (auth headers, user dict)."""
    async def _register(ac, email="jane@example.com", password="secret123"):
        r = await ac.post("/users", json={"email": email, "password": password})
        assert r.status_code == 201, r.text
        data = r.json()["data"]
        return {"Authorization": f"Bearer {data['token']}"}, data["user"]
    return _register
