from __future__ import annotations

import datetime as dt
from typing import Iterable

from taskai.domain.dates import band_days, commitment_band, next_pending_reminder_at, utcnow
from taskai.domain.urgency import score_urgency, sort_by_target_date, sort_by_urgency
from taskai.schemas.commitments import CommitmentListItem, CommitmentOut


def build_list(
    commitments: Iterable,
    reminders: Iterable,
    order: str = "target",
    now: dt.datetime | None = None,
) -> list[CommitmentListItem]:
    """Order commitments for display and attach urgency details to each row."""
    now = now or utcnow()
    reminders = list(reminders)
    if order == "urgency":
        ordered = sort_by_urgency(commitments, reminders, now)
    else:
        ordered = sort_by_target_date(commitments)

    items = []
    for c in ordered:
        urgency = score_urgency(c, reminders, now)
        base = CommitmentOut.model_validate(c).model_dump()
        items.append(
            CommitmentListItem(
                **base,
                days_until=band_days(c, reminders, now),
                urgency_band=commitment_band(c, reminders, now),
                urgency_score=urgency.score,
                urgency_reason=urgency.reason,
                next_reminder_at=next_pending_reminder_at(c.id, reminders),
            )
        )
    return items
