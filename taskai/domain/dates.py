"""Date helpers shared by the ladder, the scorer and the API layer.

All datetimes inside the service are naive UTC, matching what SQLAlchemy's
``DateTime`` column hands back from SQLite.
"""

from __future__ import annotations

import datetime as dt
from typing import Iterable

from taskai.domain.constants import CommitmentType, ReminderStatus, UrgencyBand


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: dt.datetime | None) -> dt.datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(dt.timezone.utc).replace(tzinfo=None)


def whole_days_between(start: dt.datetime, end: dt.datetime) -> int:
    """Full days from ``start`` to ``end``, truncated toward zero."""
    return int((end - start).total_seconds() / 86400)


def days_until(when: dt.datetime | None, now: dt.datetime | None = None) -> int | None:
    if when is None:
        return None
    return whole_days_between(now or utcnow(), when)


def is_same_day(a: dt.datetime, b: dt.datetime) -> bool:
    return a.date() == b.date()


def urgency_band(days: int | None) -> str:
    if days is None or days <= 3:
        return UrgencyBand.URGENT
    if days <= 29:
        return UrgencyBand.SOON
    return UrgencyBand.OK


def next_pending_reminder_at(commitment_id, reminders: Iterable) -> dt.datetime | None:
    pending = [
        r.scheduled_at
        for r in reminders
        if r.commitment_id == commitment_id and r.status == ReminderStatus.PENDING
    ]
    return min(pending) if pending else None


def band_days(commitment, reminders: Iterable, now: dt.datetime | None = None) -> int | None:
    # dated commitments count to the target, open ones to their next reminder
    if commitment.target_at is not None:
        return days_until(commitment.target_at, now)
    return days_until(next_pending_reminder_at(commitment.id, reminders), now)


def commitment_band(commitment, reminders: Iterable, now: dt.datetime | None = None) -> str:
    days = band_days(commitment, reminders, now)
    if commitment.type == CommitmentType.OPEN and (days is None or days >= 30):
        return UrgencyBand.OK
    return urgency_band(days)
