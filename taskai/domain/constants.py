from __future__ import annotations


class CommitmentType:
    EXPIRATION = "expiration"
    DEADLINE = "deadline"
    OPEN = "open"


class CommitmentStatus:
    ACTIVE = "active"
    DONE = "done"
    EXPIRED = "expired"


class CommitmentSource:
    TEMPLATE = "template"
    MANUAL = "manual"


class ReminderStatus:
    PENDING = "pending"
    # sent and snoozed are reserved; nothing produces them yet
    SENT = "sent"
    CANCELLED = "cancelled"
    SNOOZED = "snoozed"


class ReminderSource:
    LADDER = "ladder"
    SNOOZE = "snooze"


COMMITMENT_TYPE_VALUES = {CommitmentType.EXPIRATION, CommitmentType.DEADLINE, CommitmentType.OPEN}
COMMITMENT_STATUS_VALUES = {CommitmentStatus.ACTIVE, CommitmentStatus.DONE, CommitmentStatus.EXPIRED}
COMMITMENT_SOURCE_VALUES = {CommitmentSource.TEMPLATE, CommitmentSource.MANUAL}
REMINDER_STATUS_VALUES = {
    ReminderStatus.PENDING,
    ReminderStatus.SENT,
    ReminderStatus.CANCELLED,
    ReminderStatus.SNOOZED,
}
REMINDER_SOURCE_VALUES = {ReminderSource.LADDER, ReminderSource.SNOOZE}

TERMINAL_STATUSES = {CommitmentStatus.DONE, CommitmentStatus.EXPIRED}

# Days before the target date, per commitment type.
LADDER_OFFSETS_DAYS = {
    CommitmentType.EXPIRATION: (90, 30, 7, 1),
    CommitmentType.DEADLINE: (14, 7, 1),
}
# Days after creation: first review at 14, then every 30.
OPEN_REVIEW_OFFSETS_DAYS = (14, 44, 74)
DEFAULT_REVIEW_DAYS = 14


class UrgencyReason:
    COMPLETED = "Completed"
    EXPIRED = "Expired"
    OVERDUE_REMINDER = "Overdue reminder"
    PAST_TARGET_DATE = "Past target date"
    OPEN_ENDED = "Open-ended"

    @staticmethod
    def days_until_reminder(days: int) -> str:
        return f"{days} days until reminder"

    @staticmethod
    def days_until_target(days: int) -> str:
        return f"{days} days until target"


class UrgencyBand:
    URGENT = "urgent"
    SOON = "soon"
    OK = "ok"
