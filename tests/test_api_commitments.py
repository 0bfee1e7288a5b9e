import datetime as dt

from taskai.domain.dates import utcnow


def _iso(value: dt.datetime) -> str:
    return value.replace(microsecond=0).isoformat()


def _dt(value: str) -> dt.datetime:
    return dt.datetime.fromisoformat(value)


def _create(client, headers, **payload):
    resp = client.post("/commitments", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_deadline_generates_ladder(client, auth_headers):
    target = utcnow() + dt.timedelta(days=10)
    created = _create(client, auth_headers, type="deadline", title="  Project proposal ", target_at=_iso(target))
    assert created["title"] == "Project proposal"
    assert created["status"] == "active"
    assert created["source"] == "manual"

    detail = client.get(f"/commitments/{created['id']}", headers=auth_headers).json()
    scheduled = [_dt(r["scheduled_at"]) for r in detail["reminders"]]
    target_at = _dt(created["target_at"])
    assert scheduled == [target_at - dt.timedelta(days=7), target_at - dt.timedelta(days=1)]
    assert {r["source"] for r in detail["reminders"]} == {"ladder"}


def test_create_from_template_defaults(client, auth_headers):
    created = _create(client, auth_headers, template_id="passport")
    assert created["type"] == "expiration"
    assert created["title"] == "Passport Renewal"
    assert created["source"] == "template"
    assert created["target_at"] is not None

    reminders = client.get(f"/commitments/{created['id']}/reminders", headers=auth_headers).json()
    assert len(reminders) == 4


def test_create_with_unknown_template(client, auth_headers):
    resp = client.post("/commitments", json={"template_id": "boat"}, headers=auth_headers)
    assert resp.status_code == 400


def test_target_required_for_dated_types(client, auth_headers):
    resp = client.post("/commitments", json={"type": "deadline", "title": "Taxes"}, headers=auth_headers)
    assert resp.status_code == 422
    assert "Target date is required" in resp.text

    past = utcnow() - dt.timedelta(days=3)
    resp = client.post(
        "/commitments", json={"type": "deadline", "title": "Taxes", "target_at": _iso(past)}, headers=auth_headers
    )
    assert resp.status_code == 422


def test_open_commitment_ignores_target(client, auth_headers):
    created = _create(
        client, auth_headers, type="open", title="Learn Spanish",
        target_at=_iso(utcnow() + dt.timedelta(days=5)),
    )
    assert created["target_at"] is None
    reminders = client.get(f"/commitments/{created['id']}/reminders", headers=auth_headers).json()
    created_at = _dt(created["created_at"])
    assert [_dt(r["scheduled_at"]) for r in reminders] == [
        created_at + dt.timedelta(days=d) for d in (14, 44, 74)
    ]


def test_custom_reminder_dates(client, auth_headers):
    now = utcnow()
    target = now + dt.timedelta(days=30)
    dates = [_iso(now + dt.timedelta(days=d)) for d in (20, 5)]
    created = _create(
        client, auth_headers, type="expiration", title="Lease", target_at=_iso(target), reminder_dates=dates
    )
    reminders = client.get(f"/commitments/{created['id']}/reminders", headers=auth_headers).json()
    assert [r["scheduled_at"] for r in reminders] == sorted(dates)

    too_many = [_iso(now + dt.timedelta(days=d)) for d in (1, 2, 3, 4, 5)]
    resp = client.post(
        "/commitments",
        json={"type": "expiration", "title": "Lease", "target_at": _iso(target), "reminder_dates": too_many},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Maximum 4 reminders allowed."


def test_list_orders_and_urgency_fields(client, auth_headers):
    now = utcnow()
    far = _create(client, auth_headers, type="expiration", title="Insurance",
                  target_at=_iso(now + dt.timedelta(days=180)), reminder_dates=[])
    near = _create(client, auth_headers, type="deadline", title="Proposal",
                   target_at=_iso(now + dt.timedelta(days=10)))
    open_c = _create(client, auth_headers, type="open", title="Review options")

    items = client.get("/commitments", headers=auth_headers).json()
    assert [i["id"] for i in items] == [near["id"], far["id"], open_c["id"]]

    by_id = {i["id"]: i for i in items}
    assert by_id[near["id"]]["urgency_band"] == "soon"
    assert by_id[near["id"]]["days_until"] == 9
    assert by_id[near["id"]]["urgency_reason"] == "2 days until reminder"
    assert by_id[far["id"]]["urgency_band"] == "ok"
    assert by_id[far["id"]]["urgency_reason"] == "179 days until target"
    assert by_id[far["id"]]["next_reminder_at"] is None
    assert by_id[open_c["id"]]["urgency_band"] == "soon"
    assert by_id[open_c["id"]]["urgency_reason"] == "13 days until reminder"

    ranked = client.get("/commitments?order=urgency", headers=auth_headers).json()
    assert [i["id"] for i in ranked] == [near["id"], open_c["id"], far["id"]]

    assert client.get("/commitments?status=archived", headers=auth_headers).status_code == 422
    assert client.get("/commitments?order=title", headers=auth_headers).status_code == 422


def test_mark_done_cancels_reminders_and_is_terminal(client, auth_headers):
    created = _create(client, auth_headers, type="deadline", title="Taxes",
                      target_at=_iso(utcnow() + dt.timedelta(days=20)))
    resp = client.post(f"/commitments/{created['id']}/done", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "done"

    reminders = client.get(f"/commitments/{created['id']}/reminders", headers=auth_headers).json()
    assert reminders and {r["status"] for r in reminders} == {"cancelled"}

    assert client.post(f"/commitments/{created['id']}/done", headers=auth_headers).status_code == 409

    done = client.get("/commitments?status=done", headers=auth_headers).json()
    assert [i["id"] for i in done] == [created["id"]]
    assert done[0]["urgency_reason"] == "Completed"
    assert client.get("/commitments", headers=auth_headers).json() == []


def test_patch_target_regenerates_pending(client, auth_headers):
    now = utcnow()
    created = _create(client, auth_headers, type="deadline", title="Report",
                      target_at=_iso(now + dt.timedelta(days=10)))
    new_target = now + dt.timedelta(days=40)
    resp = client.patch(f"/commitments/{created['id']}", json={"target_at": _iso(new_target)}, headers=auth_headers)
    assert resp.status_code == 200

    reminders = client.get(f"/commitments/{created['id']}/reminders", headers=auth_headers).json()
    target_at = _dt(resp.json()["target_at"])
    assert [_dt(r["scheduled_at"]) for r in reminders] == [
        target_at - dt.timedelta(days=d) for d in (14, 7, 1)
    ]

    resp = client.patch(f"/commitments/{created['id']}", json={"title": "Quarterly report"}, headers=auth_headers)
    assert resp.json()["title"] == "Quarterly report"
    after = client.get(f"/commitments/{created['id']}/reminders", headers=auth_headers).json()
    assert [r["id"] for r in after] == [r["id"] for r in reminders]


def test_patch_to_open_clears_target(client, auth_headers):
    created = _create(client, auth_headers, type="deadline", title="Read more",
                      target_at=_iso(utcnow() + dt.timedelta(days=10)))
    resp = client.patch(f"/commitments/{created['id']}", json={"type": "open"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["type"] == "open"
    assert resp.json()["target_at"] is None
    reminders = client.get(f"/commitments/{created['id']}/reminders", headers=auth_headers).json()
    assert len(reminders) == 3


def test_ladder_preview(client, auth_headers):
    target = utcnow() + dt.timedelta(days=200)
    resp = client.post(
        "/commitments/ladder-preview", json={"type": "expiration", "target_at": _iso(target)}, headers=auth_headers
    )
    assert resp.status_code == 200
    dates = [_dt(d) for d in resp.json()["reminder_dates"]]
    expected = target.replace(microsecond=0)
    assert dates == [expected - dt.timedelta(days=d) for d in (90, 30, 7, 1)]

    resp = client.post("/commitments/ladder-preview", json={"type": "open"}, headers=auth_headers)
    assert len(resp.json()["reminder_dates"]) == 3

    resp = client.post("/commitments/ladder-preview", json={"type": "someday"}, headers=auth_headers)
    assert resp.status_code == 422


def test_schedule_replace_and_regenerate(client, auth_headers):
    now = utcnow()
    created = _create(client, auth_headers, type="expiration", title="Warranty",
                      target_at=_iso(now + dt.timedelta(days=60)))
    cid = created["id"]

    dates = [_iso(now + dt.timedelta(days=d)) for d in (3, 10)]
    resp = client.put(f"/commitments/{cid}/schedule", json={"reminder_dates": dates}, headers=auth_headers)
    assert resp.status_code == 200
    assert [r["scheduled_at"] for r in resp.json()] == dates

    day = (now + dt.timedelta(days=5)).date()
    same_day = [_iso(dt.datetime.combine(day, dt.time(h))) for h in (9, 18)]
    resp = client.put(f"/commitments/{cid}/schedule", json={"reminder_dates": same_day}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Only one reminder per day allowed."

    after_target = [_iso(now + dt.timedelta(days=90))]
    resp = client.put(f"/commitments/{cid}/schedule", json={"reminder_dates": after_target}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Reminder date cannot be after the task target date"

    resp = client.post(f"/commitments/{cid}/reminders/regenerate", headers=auth_headers)
    assert resp.status_code == 200
    target_at = _dt(created["target_at"])
    assert [_dt(r["scheduled_at"]) for r in resp.json()] == [
        target_at - dt.timedelta(days=d) for d in (30, 7, 1)
    ]


def test_delete_commitment(client, auth_headers):
    created = _create(client, auth_headers, type="open", title="Declutter")
    assert client.delete(f"/commitments/{created['id']}", headers=auth_headers).json() == {"ok": True}
    assert client.get(f"/commitments/{created['id']}", headers=auth_headers).status_code == 404
    assert client.delete(f"/commitments/{created['id']}", headers=auth_headers).status_code == 404


def test_other_users_cannot_see_commitments(client, auth_headers, other_headers):
    created = _create(client, auth_headers, type="open", title="Private")
    cid = created["id"]
    assert client.get(f"/commitments/{cid}", headers=other_headers).status_code == 404
    assert client.patch(f"/commitments/{cid}", json={"title": "x"}, headers=other_headers).status_code == 404
    assert client.post(f"/commitments/{cid}/done", headers=other_headers).status_code == 404
    assert client.delete(f"/commitments/{cid}", headers=other_headers).status_code == 404
    assert client.get("/commitments", headers=other_headers).json() == []


def test_templates_are_public(client):
    resp = client.get("/templates")
    assert resp.status_code == 200
    assert [t["id"] for t in resp.json()] == ["passport", "insurance", "warranty", "custom"]
    assert resp.json()[3]["type"] == "deadline"


def test_patch_rejects_null_title_and_type(client, auth_headers):
    created = _create(client, auth_headers, type="open", title="Learn Spanish")
    for field in ("title", "type"):
        resp = client.patch(f"/commitments/{created['id']}", json={field: None}, headers=auth_headers)
        assert resp.status_code == 422
        assert f"{field} cannot be null" in resp.text

    detail = client.get(f"/commitments/{created['id']}", headers=auth_headers).json()
    assert (detail["title"], detail["type"]) == ("Learn Spanish", "open")

    resp = client.patch(f"/commitments/{created['id']}", json={"description": None}, headers=auth_headers)
    assert resp.status_code == 200
