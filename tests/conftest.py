import pytest
from factories import make_session
from fastapi.testclient import TestClient

from taskai import crud
from taskai.abuse import reset_sign_in_tracker
from taskai.db import get_db
from taskai.main import create_app
from taskai.rate_limit import reset_request_quota
from taskai.settings import settings


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    monkeypatch.setattr(settings, "API_KEY_SECRET", "test-secret")
    monkeypatch.setattr(settings, "API_KEY", None)
    monkeypatch.setattr(settings, "REDIS_URL", None)
    monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)
    reset_request_quota()
    reset_sign_in_tracker()
    yield
    reset_request_quota()
    reset_sign_in_tracker()


@pytest.fixture()
def test_app():
    TestingSessionLocal = make_session()
    app = create_app()

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return app, TestingSessionLocal


@pytest.fixture()
def client(test_app):
    app, _ = test_app
    return TestClient(app)


def _headers_for(SessionLocal, email: str) -> dict:
    with SessionLocal() as db:
        user = crud.create_user(db, email, "correct-horse", "Test")
        token = crud.issue_session_token(db, user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth_headers(test_app):
    _, TestingSessionLocal = test_app
    return _headers_for(TestingSessionLocal, "owner@example.com")


@pytest.fixture()
def other_headers(test_app):
    _, TestingSessionLocal = test_app
    return _headers_for(TestingSessionLocal, "other@example.com")
