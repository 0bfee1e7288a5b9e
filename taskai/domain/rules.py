from __future__ import annotations

import datetime as dt
from typing import Iterable

from taskai.domain.constants import CommitmentStatus, ReminderSource, ReminderStatus
from taskai.domain.dates import is_same_day, utcnow
from taskai.settings import settings


REMINDER_SAME_DAY = "Only one reminder per day allowed."
REMINDER_AFTER_TARGET = "Reminder date cannot be after the task target date"
DATE_TIME_MUST_BE_FUTURE = "Date and time must be in the future"
COMMITMENT_NOT_ACTIVE = "Reminders can only be changed on active tasks"

_ALLOWED_TRANSITIONS = {
    CommitmentStatus.ACTIVE: {CommitmentStatus.DONE, CommitmentStatus.EXPIRED},
}


class InvalidTransition(ValueError):
    pass


class ReminderRuleError(ValueError):
    pass


def ensure_transition(current: str, new: str) -> None:
    if new not in _ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransition(f"Cannot move task from {current} to {new}")


def _check_date(when: dt.datetime, target_at: dt.datetime | None, now: dt.datetime) -> None:
    if when <= now:
        raise ReminderRuleError(DATE_TIME_MUST_BE_FUTURE)
    if target_at is not None and when > target_at:
        raise ReminderRuleError(REMINDER_AFTER_TARGET)


def check_new_reminder(
    reminders: Iterable,
    when: dt.datetime,
    *,
    source: str = ReminderSource.SNOOZE,
    target_at: dt.datetime | None = None,
    now: dt.datetime | None = None,
) -> None:
    """Raise ReminderRuleError if a new pending reminder at ``when`` breaks a limit."""
    now = now or utcnow()
    pending = [r for r in reminders if r.status == ReminderStatus.PENDING]

    if len(pending) >= settings.MAX_PENDING_REMINDERS:
        raise ReminderRuleError(f"Maximum {settings.MAX_PENDING_REMINDERS} reminders allowed.")
    if source == ReminderSource.SNOOZE:
        snoozes = [r for r in pending if r.source == ReminderSource.SNOOZE]
        if len(snoozes) >= settings.MAX_PENDING_SNOOZES:
            raise ReminderRuleError(f"Maximum {settings.MAX_PENDING_SNOOZES} snoozes allowed.")
    _check_date(when, target_at, now)
    if any(is_same_day(r.scheduled_at, when) for r in pending):
        raise ReminderRuleError(REMINDER_SAME_DAY)


def check_reschedule(
    reminders: Iterable,
    reminder,
    when: dt.datetime,
    *,
    target_at: dt.datetime | None = None,
    now: dt.datetime | None = None,
) -> None:
    now = now or utcnow()
    if reminder.status != ReminderStatus.PENDING:
        raise ReminderRuleError("Only pending reminders can be rescheduled")
    _check_date(when, target_at, now)
    others = [r for r in reminders if r.status == ReminderStatus.PENDING and r.id != reminder.id]
    if any(is_same_day(r.scheduled_at, when) for r in others):
        raise ReminderRuleError(REMINDER_SAME_DAY)


def check_schedule(
    dates: Iterable[dt.datetime],
    *,
    target_at: dt.datetime | None = None,
    now: dt.datetime | None = None,
) -> list[dt.datetime]:
    """Validate a user-edited list of ladder dates and return it sorted."""
    now = now or utcnow()
    ordered = sorted(dates)
    if len(ordered) > settings.MAX_PENDING_REMINDERS:
        raise ReminderRuleError(f"Maximum {settings.MAX_PENDING_REMINDERS} reminders allowed.")
    for i, when in enumerate(ordered):
        _check_date(when, target_at, now)
        if i and is_same_day(ordered[i - 1], when):
            raise ReminderRuleError(REMINDER_SAME_DAY)
    return ordered
