"""Reminder ladder: the fixed set of reminder dates a commitment gets.

Expiration and deadline commitments count back from their target date; open
commitments count forward from creation (first review after 14 days, then
every 30). Dates already behind ``now`` are dropped, so the ladder shrinks as
a commitment gets closer and may come back empty. Nothing here persists
anything; callers store the drafts and must call again after an edit.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

from taskai.domain.constants import (
    DEFAULT_REVIEW_DAYS,
    LADDER_OFFSETS_DAYS,
    OPEN_REVIEW_OFFSETS_DAYS,
    TERMINAL_STATUSES,
    CommitmentType,
    ReminderSource,
    ReminderStatus,
)
from taskai.domain.dates import utcnow


@dataclass(frozen=True)
class ReminderDraft:
    commitment_id: int | None
    scheduled_at: dt.datetime
    status: str = ReminderStatus.PENDING
    source: str = ReminderSource.LADDER


def generate_ladder(commitment, anchor: dt.datetime, now: dt.datetime | None = None) -> list[dt.datetime]:
    now = now or utcnow()

    if commitment.type == CommitmentType.OPEN:
        created_at = commitment.created_at
        if created_at is None:
            return []
        dates = [created_at + dt.timedelta(days=d) for d in OPEN_REVIEW_OFFSETS_DAYS]
    else:
        offsets = LADDER_OFFSETS_DAYS.get(commitment.type)
        if not offsets or anchor is None:
            return []
        dates = [anchor - dt.timedelta(days=d) for d in offsets]

    return sorted(d for d in dates if d >= now)


def get_next_review_date(commitment) -> dt.datetime | None:
    if commitment.type != CommitmentType.OPEN:
        return None
    if commitment.next_review_at is not None:
        return commitment.next_review_at
    if commitment.created_at is None:
        return None
    return commitment.created_at + dt.timedelta(days=DEFAULT_REVIEW_DAYS)


def resolve_anchor(commitment) -> dt.datetime | None:
    if commitment.type == CommitmentType.OPEN:
        return get_next_review_date(commitment)
    return commitment.target_at


def generate_reminders_from_commitment(commitment, now: dt.datetime | None = None) -> list[ReminderDraft]:
    if commitment.status in TERMINAL_STATUSES:
        return []

    anchor = resolve_anchor(commitment)
    if anchor is None:
        return []

    return [
        ReminderDraft(commitment_id=commitment.id, scheduled_at=when)
        for when in generate_ladder(commitment, anchor, now)
    ]
