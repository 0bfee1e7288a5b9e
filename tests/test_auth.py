import datetime as dt

from taskai import crud, security
from taskai.api.deps import session_token
from taskai.domain.dates import utcnow
from taskai.settings import settings


def _sign_up(client, email="ana@example.com", password="correct-horse"):
    return client.post("/auth/sign-up", json={"email": email, "password": password, "name": "Ana"})


def test_sign_up_returns_working_session(client):
    resp = _sign_up(client, email="  Ana@Example.com ")
    assert resp.status_code == 201
    body = resp.json()
    assert body["user"]["email"] == "ana@example.com"
    assert body["user"]["has_seen_onboarding"] is False
    assert body["token"].startswith("tk_")

    expires = dt.datetime.fromisoformat(body["expires_at"])
    assert expires - utcnow() > dt.timedelta(days=settings.SESSION_TTL_DAYS - 1)

    headers = {"Authorization": f"Bearer {body['token']}"}
    session = client.get("/auth/session", headers=headers)
    assert session.status_code == 200
    assert session.json()["email"] == "ana@example.com"


def test_duplicate_email_is_rejected(client):
    assert _sign_up(client).status_code == 201
    resp = _sign_up(client, email="ANA@example.com")
    assert resp.status_code == 409


def test_short_password_is_rejected(client):
    assert _sign_up(client, password="short").status_code == 422


def test_sign_in_rotates_token(client):
    first = _sign_up(client).json()["token"]
    resp = client.post("/auth/sign-in", json={"email": "ana@example.com", "password": "correct-horse"})
    assert resp.status_code == 200
    second = resp.json()["token"]
    assert second != first

    assert client.get("/auth/session", headers={"Authorization": f"Bearer {first}"}).status_code == 401
    assert client.get("/auth/session", headers={"X-User-Key": second}).status_code == 200


def test_sign_out_revokes_token(client):
    token = _sign_up(client).json()["token"]
    headers = {"Authorization": f"Bearer {token}"}
    assert client.post("/auth/sign-out", headers=headers).json() == {"ok": True}
    resp = client.get("/auth/session", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid or expired session token"


def test_missing_token(client):
    resp = client.get("/commitments")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Missing session token"


def test_expired_token_is_rejected(client, test_app):
    _, SessionLocal = test_app
    token = _sign_up(client).json()["token"]
    with SessionLocal() as db:
        user = crud.get_user_by_email(db, "ana@example.com")
        user.token_expires_at = utcnow() - dt.timedelta(minutes=1)
        db.commit()
    assert client.get("/auth/session", headers={"Authorization": f"Bearer {token}"}).status_code == 401


def test_repeated_failures_lock_sign_in(client):
    _sign_up(client)
    bad = {"email": "ana@example.com", "password": "wrong-password"}
    for _ in range(settings.AUTH_FAIL_MAX):
        resp = client.post("/auth/sign-in", json=bad)
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Sign in failed"

    resp = client.post("/auth/sign-in", json={"email": "ana@example.com", "password": "correct-horse"})
    assert resp.status_code == 429
    assert "Retry-After" in resp.headers


def test_onboarding_complete(client):
    token = _sign_up(client).json()["token"]
    headers = {"Authorization": f"Bearer {token}"}
    resp = client.post("/auth/onboarding/complete", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["has_seen_onboarding"] is True
    assert client.get("/auth/session", headers=headers).json()["has_seen_onboarding"] is True


def test_global_api_key_gate(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "gate")
    assert client.get("/commitments", headers=auth_headers).status_code == 401
    assert client.get("/commitments", headers={**auth_headers, "X-API-Key": "gate"}).status_code == 200


def test_session_token_header_precedence():
    assert session_token("Bearer tk_one", "tk_two") == "tk_one"
    assert session_token("Basic abc", "tk_two") == "tk_two"
    assert session_token("Bearer   ", None) is None
    assert session_token(None, "  ") is None


def test_passwords_are_stored_as_bcrypt(client, test_app):
    _, SessionLocal = test_app
    _sign_up(client)
    with SessionLocal() as db:
        stored = crud.get_user_by_email(db, "ana@example.com").password_hash
    assert stored.startswith("$2b$")
    assert "correct-horse" not in stored
    assert security.verify_password("correct-horse", stored)
    assert not security.verify_password("correct-horsf", stored)
    assert not security.verify_password("correct-horse", "legacy$deadbeef")


def test_password_longer_than_bcrypt_limit_is_rejected(client):
    assert _sign_up(client, password="é" * 40).status_code == 422
    assert _sign_up(client, password="a" * 72).status_code == 201
