from taskai.rate_limit import LocalRequestQuota
from taskai.settings import settings


def test_rate_limit_triggers(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "API_RATE_LIMIT_PER_MIN", 2)
    monkeypatch.setattr(settings, "API_RATE_WINDOW_SEC", 60)

    assert client.get("/commitments", headers=auth_headers).status_code == 200
    assert client.get("/commitments", headers=auth_headers).status_code == 200
    resp = client.get("/commitments", headers=auth_headers)
    assert resp.status_code == 429
    assert "Retry-After" in resp.headers


def test_rate_limit_is_per_user(client, auth_headers, other_headers, monkeypatch):
    monkeypatch.setattr(settings, "API_RATE_LIMIT_PER_MIN", 1)

    assert client.get("/commitments", headers=auth_headers).status_code == 200
    assert client.get("/commitments", headers=auth_headers).status_code == 429
    assert client.get("/commitments", headers=other_headers).status_code == 200


def test_local_quota_window():
    quota = LocalRequestQuota()
    assert quota.check(1, 1, 60).allowed
    blocked = quota.check(1, 1, 60)
    assert not blocked.allowed
    assert 1 <= blocked.retry_after <= 60
    assert quota.check(2, 1, 60).allowed


def test_local_quota_drops_idle_users():
    clock = [0.0]
    quota = LocalRequestQuota(clock=lambda: clock[0])
    quota.check(1, 5, 60)
    quota.check(2, 5, 60)

    clock[0] = 30.0
    quota.check(1, 5, 60)
    assert len(quota) == 2

    clock[0] = 61.0
    quota.check(3, 5, 60)
    assert len(quota) == 2
    assert quota.check(2, 1, 60).allowed

    clock[0] = 200.0
    quota.check(1, 5, 60)
    assert len(quota) == 1
