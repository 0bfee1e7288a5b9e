from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Iterable

from taskai.domain.constants import CommitmentStatus, ReminderStatus, UrgencyReason
from taskai.domain.dates import utcnow, whole_days_between


@dataclass(frozen=True)
class UrgencyScore:
    commitment: Any
    score: float
    reason: str


def next_pending_reminder(commitment, reminders: Iterable):
    """Earliest pending reminder of this commitment; the first listed wins a tie."""
    pending = [
        r for r in reminders
        if r.commitment_id == commitment.id and r.status == ReminderStatus.PENDING
    ]
    if not pending:
        return None
    return min(pending, key=lambda r: r.scheduled_at)


def score_urgency(commitment, reminders: Iterable, now: dt.datetime | None = None) -> UrgencyScore:
    """Score one commitment; higher means more urgent.

    Rules are checked in order and the first match wins: done, expired by
    date (regardless of stored status), earliest pending reminder, target
    date, open-ended fallback.
    """
    if commitment.status == CommitmentStatus.DONE:
        return UrgencyScore(commitment, 0, UrgencyReason.COMPLETED)

    now = now or utcnow()
    target_at = commitment.target_at

    if target_at is not None and target_at < now:
        return UrgencyScore(commitment, 1000, UrgencyReason.EXPIRED)

    next_reminder = next_pending_reminder(commitment, reminders)
    if next_reminder is not None:
        if next_reminder.scheduled_at < now:
            return UrgencyScore(commitment, 900, UrgencyReason.OVERDUE_REMINDER)
        days = whole_days_between(now, next_reminder.scheduled_at)
        return UrgencyScore(commitment, max(0, 100 - days), UrgencyReason.days_until_reminder(days))

    if target_at is not None:
        # unreachable after the expired check above
        if target_at < now:
            return UrgencyScore(commitment, 800, UrgencyReason.PAST_TARGET_DATE)
        days = whole_days_between(now, target_at)
        return UrgencyScore(commitment, max(0, 50 - days / 10), UrgencyReason.days_until_target(days))

    return UrgencyScore(commitment, 10, UrgencyReason.OPEN_ENDED)


def sort_by_urgency(commitments: Iterable, reminders: Iterable, now: dt.datetime | None = None) -> list:
    now = now or utcnow()
    reminders = list(reminders)
    scored = [score_urgency(c, reminders, now) for c in commitments]
    # sorted() stays stable with reverse=True
    scored = sorted(scored, key=lambda s: s.score, reverse=True)
    return [s.commitment for s in scored]


def sort_by_target_date(commitments: Iterable) -> list:
    return sorted(
        commitments,
        key=lambda c: (c.target_at is None, c.target_at or dt.datetime.min),
    )
