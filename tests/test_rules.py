import datetime as dt

import pytest
from factories import NOW, days, make_reminder

from taskai.domain import rules
from taskai.domain.constants import ReminderSource, ReminderStatus


def test_transitions_only_leave_active():
    rules.ensure_transition("active", "done")
    rules.ensure_transition("active", "expired")
    for current, new in [("done", "active"), ("expired", "done"), ("done", "done"), ("active", "active")]:
        with pytest.raises(rules.InvalidTransition):
            rules.ensure_transition(current, new)


def test_max_pending_reminders():
    existing = [make_reminder(i, 1, NOW + days(i)) for i in range(1, 5)]
    with pytest.raises(rules.ReminderRuleError, match="Maximum 4 reminders allowed."):
        rules.check_new_reminder(existing, NOW + days(10), now=NOW)


def test_cancelled_reminders_do_not_count():
    existing = [make_reminder(i, 1, NOW + days(i), status=ReminderStatus.CANCELLED) for i in range(1, 5)]
    rules.check_new_reminder(existing, NOW + days(1), now=NOW)


def test_max_pending_snoozes():
    existing = [make_reminder(i, 1, NOW + days(i), source=ReminderSource.SNOOZE) for i in range(1, 4)]
    with pytest.raises(rules.ReminderRuleError, match="Maximum 3 snoozes allowed."):
        rules.check_new_reminder(existing, NOW + days(10), now=NOW)
    rules.check_new_reminder(existing, NOW + days(10), source=ReminderSource.LADDER, now=NOW)


def test_same_day_and_date_bounds():
    existing = [make_reminder(1, 1, NOW + days(3))]
    with pytest.raises(rules.ReminderRuleError, match="Only one reminder per day"):
        rules.check_new_reminder(existing, NOW + days(3) + dt.timedelta(hours=1), now=NOW)
    with pytest.raises(rules.ReminderRuleError, match="must be in the future"):
        rules.check_new_reminder(existing, NOW - days(1), now=NOW)
    with pytest.raises(rules.ReminderRuleError, match="after the task target date"):
        rules.check_new_reminder(existing, NOW + days(20), target_at=NOW + days(10), now=NOW)


def test_reschedule_ignores_the_reminder_itself():
    moving = make_reminder(1, 1, NOW + days(3))
    other = make_reminder(2, 1, NOW + days(6))
    rules.check_reschedule([moving, other], moving, NOW + days(3.1), now=NOW)
    with pytest.raises(rules.ReminderRuleError):
        rules.check_reschedule([moving, other], moving, NOW + days(6), now=NOW)


def test_check_schedule_sorts_and_validates():
    dates = [NOW + days(9), NOW + days(2)]
    assert rules.check_schedule(dates, target_at=NOW + days(10), now=NOW) == [NOW + days(2), NOW + days(9)]
    with pytest.raises(rules.ReminderRuleError, match="Maximum 4"):
        rules.check_schedule([NOW + days(i) for i in range(1, 6)], now=NOW)
    with pytest.raises(rules.ReminderRuleError, match="Only one reminder per day"):
        rules.check_schedule([NOW + days(2), NOW + days(2.01)], now=NOW)
