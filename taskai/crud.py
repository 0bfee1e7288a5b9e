from __future__ import annotations

import datetime as dt
import logging
from typing import Iterable

from sqlalchemy import select, and_, delete
from sqlalchemy.orm import Session

from taskai import security
from taskai.domain import ladder, rules
from taskai.domain.constants import (
    CommitmentSource,
    CommitmentStatus,
    CommitmentType,
    ReminderSource,
    ReminderStatus,
)
from taskai.domain.dates import utcnow
from taskai.domain.templates import get_template
from taskai.models.commitment import Commitment
from taskai.models.reminder import Reminder
from taskai.models.user import User
from taskai.schemas.commitments import TARGET_DATE_REQUIRED, CommitmentCreate, CommitmentUpdate
from taskai.settings import settings

logger = logging.getLogger("taskai")

_SCHEDULE_FIELDS = ("type", "target_at", "next_review_at")


# Users and sessions


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email.strip().lower())).scalar_one_or_none()


def create_user(db: Session, email: str, password: str, name: str | None = None) -> User | None:
    if get_user_by_email(db, email):
        return None
    user = User(email=email.strip().lower(), name=name, password_hash=security.hash_password(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    user = get_user_by_email(db, email)
    if not user or not security.verify_password(password, user.password_hash):
        return None
    return user


def issue_session_token(db: Session, user_id: int, now: dt.datetime | None = None) -> str:
    user = db.get(User, user_id)
    if not user:
        raise ValueError(f"User {user_id} not found")
    now = now or utcnow()
    token = security.new_session_token()
    user.token_hash = security.hash_session_token(token)
    user.token_hint = security.token_prefix(token)
    user.token_issued_at = now
    user.token_expires_at = now + dt.timedelta(days=settings.SESSION_TTL_DAYS)
    db.add(user)
    db.commit()
    return token


def revoke_session_token(db: Session, user_id: int) -> None:
    user = db.get(User, user_id)
    if not user:
        return
    user.token_hash = None
    user.token_hint = None
    user.token_expires_at = None
    db.add(user)
    db.commit()


def get_user_by_session_token(db: Session, token: str, now: dt.datetime | None = None) -> User | None:
    digest = security.hash_session_token(token)
    user = db.execute(select(User).where(User.token_hash == digest)).scalar_one_or_none()
    if not user:
        return None
    if user.token_expires_at and user.token_expires_at < (now or utcnow()):
        return None
    return user


def mark_onboarding_seen(db: Session, user_id: int) -> User | None:
    user = db.get(User, user_id)
    if not user:
        return None
    user.has_seen_onboarding = True
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


# Commitments


def get_commitment(db: Session, user_id: int, commitment_id: int) -> Commitment | None:
    return db.execute(
        select(Commitment).where(and_(Commitment.id == commitment_id, Commitment.user_id == user_id))
    ).scalar_one_or_none()


def list_commitments(db: Session, user_id: int, status: str | None = None) -> list[Commitment]:
    stmt = select(Commitment).where(Commitment.user_id == user_id)
    if status:
        stmt = stmt.where(Commitment.status == status)
    return list(db.execute(stmt.order_by(Commitment.created_at.asc(), Commitment.id.asc())).scalars())


def create_commitment(db: Session, user_id: int, data: CommitmentCreate, now: dt.datetime | None = None) -> Commitment:
    now = now or utcnow()
    template = get_template(data.template_id)
    if data.template_id and not template:
        raise ValueError(f"Unknown template: {data.template_id}")

    type_ = data.type or template.type
    title = data.title or (template.default_title if template else None)
    if not title:
        raise ValueError("Title is required")

    target_at = data.target_at
    if type_ == CommitmentType.OPEN:
        target_at = None
    elif target_at is None and template and template.default_days:
        target_at = now + dt.timedelta(days=template.default_days)
    if type_ != CommitmentType.OPEN and target_at is None:
        raise ValueError(TARGET_DATE_REQUIRED)

    custom_dates = None
    if data.reminder_dates is not None:
        custom_dates = rules.check_schedule(data.reminder_dates, target_at=target_at, now=now)

    commitment = Commitment(
        user_id=user_id,
        type=type_,
        title=title,
        description=data.description,
        target_at=target_at,
        next_review_at=data.next_review_at if type_ == CommitmentType.OPEN else None,
        status=CommitmentStatus.ACTIVE,
        source=CommitmentSource.TEMPLATE if template else CommitmentSource.MANUAL,
        created_at=now,
        updated_at=now,
    )
    db.add(commitment)
    db.flush()

    _add_reminders(db, commitment, custom_dates, now)
    db.commit()
    db.refresh(commitment)
    logger.info("Commitment created id=%s type=%s user_id=%s", commitment.id, commitment.type, user_id)
    return commitment


def update_commitment(
    db: Session,
    user_id: int,
    commitment_id: int,
    patch: CommitmentUpdate,
    now: dt.datetime | None = None,
) -> Commitment | None:
    commitment = get_commitment(db, user_id, commitment_id)
    if not commitment:
        return None
    now = now or utcnow()
    data = patch.model_dump(exclude_unset=True)
    reminder_dates = data.pop("reminder_dates", None)

    new_type = data.get("type", commitment.type)
    if new_type == CommitmentType.OPEN:
        data["target_at"] = None
    else:
        data["next_review_at"] = None
        if data.get("target_at", commitment.target_at) is None:
            raise ValueError(TARGET_DATE_REQUIRED)

    schedule_changed = any(
        field in data and data[field] != getattr(commitment, field) for field in _SCHEDULE_FIELDS
    )
    for k, v in data.items():
        setattr(commitment, k, v)

    if reminder_dates is not None or schedule_changed:
        try:
            _replace_pending(db, commitment, reminder_dates, now)
        except ValueError:
            db.rollback()
            raise

    commitment.updated_at = now
    db.add(commitment)
    db.commit()
    db.refresh(commitment)
    return commitment


def delete_commitment(db: Session, user_id: int, commitment_id: int) -> bool:
    commitment = get_commitment(db, user_id, commitment_id)
    if not commitment:
        return False
    db.delete(commitment)
    db.commit()
    return True


def mark_commitment_done(db: Session, user_id: int, commitment_id: int, now: dt.datetime | None = None) -> Commitment | None:
    commitment = get_commitment(db, user_id, commitment_id)
    if not commitment:
        return None
    rules.ensure_transition(commitment.status, CommitmentStatus.DONE)
    commitment.status = CommitmentStatus.DONE
    commitment.updated_at = now or utcnow()
    cancelled = _cancel_pending(db, commitment.id)
    db.add(commitment)
    db.commit()
    db.refresh(commitment)
    logger.info("Commitment done id=%s cancelled_reminders=%s", commitment.id, cancelled)
    return commitment


def expire_past_due(db: Session, now: dt.datetime | None = None) -> list[int]:
    """Move active commitments whose target has passed to expired."""
    now = now or utcnow()
    overdue = list(
        db.execute(
            select(Commitment).where(
                and_(
                    Commitment.status == CommitmentStatus.ACTIVE,
                    Commitment.target_at.is_not(None),
                    Commitment.target_at < now,
                )
            )
        ).scalars()
    )
    for commitment in overdue:
        rules.ensure_transition(commitment.status, CommitmentStatus.EXPIRED)
        commitment.status = CommitmentStatus.EXPIRED
        commitment.updated_at = now
        _cancel_pending(db, commitment.id)
        db.add(commitment)
    if overdue:
        db.commit()
    return [c.id for c in overdue]


# Reminders


def list_reminders(db: Session, commitment_id: int) -> list[Reminder]:
    return list(
        db.execute(
            select(Reminder)
            .where(Reminder.commitment_id == commitment_id)
            .order_by(Reminder.scheduled_at.asc(), Reminder.id.asc())
        ).scalars()
    )


def list_reminders_for_user(db: Session, user_id: int, status: str | None = None) -> list[Reminder]:
    stmt = select(Reminder).join(Commitment).where(Commitment.user_id == user_id)
    if status:
        stmt = stmt.where(Reminder.status == status)
    return list(db.execute(stmt.order_by(Reminder.scheduled_at.asc(), Reminder.id.asc())).scalars())


def get_reminder(db: Session, user_id: int, reminder_id: int) -> Reminder | None:
    return db.execute(
        select(Reminder)
        .join(Commitment)
        .where(and_(Reminder.id == reminder_id, Commitment.user_id == user_id))
    ).scalar_one_or_none()


def _add_reminders(
    db: Session,
    commitment: Commitment,
    dates: Iterable[dt.datetime] | None,
    now: dt.datetime,
) -> list[Reminder]:
    if dates is None:
        dates = [d.scheduled_at for d in ladder.generate_reminders_from_commitment(commitment, now)]
    created = [
        Reminder(
            commitment_id=commitment.id,
            scheduled_at=when,
            status=ReminderStatus.PENDING,
            source=ReminderSource.LADDER,
            created_at=now,
        )
        for when in dates
    ]
    db.add_all(created)
    return created


def _cancel_pending(db: Session, commitment_id: int) -> int:
    pending = [r for r in list_reminders(db, commitment_id) if r.status == ReminderStatus.PENDING]
    for reminder in pending:
        reminder.status = ReminderStatus.CANCELLED
        db.add(reminder)
    return len(pending)


def _replace_pending(
    db: Session,
    commitment: Commitment,
    dates: Iterable[dt.datetime] | None,
    now: dt.datetime,
) -> None:
    if dates is not None:
        if commitment.status != CommitmentStatus.ACTIVE:
            raise rules.ReminderRuleError(rules.COMMITMENT_NOT_ACTIVE)
        dates = rules.check_schedule(dates, target_at=commitment.target_at, now=now)
    db.execute(
        delete(Reminder).where(
            and_(Reminder.commitment_id == commitment.id, Reminder.status == ReminderStatus.PENDING)
        )
    )
    db.flush()
    _add_reminders(db, commitment, dates, now)


def replace_schedule(
    db: Session,
    user_id: int,
    commitment_id: int,
    dates: Iterable[dt.datetime],
    now: dt.datetime | None = None,
) -> list[Reminder] | None:
    commitment = get_commitment(db, user_id, commitment_id)
    if not commitment:
        return None
    _replace_pending(db, commitment, list(dates), now or utcnow())
    db.commit()
    return list_reminders(db, commitment.id)


def regenerate_reminders(db: Session, user_id: int, commitment_id: int, now: dt.datetime | None = None) -> list[Reminder] | None:
    commitment = get_commitment(db, user_id, commitment_id)
    if not commitment:
        return None
    _replace_pending(db, commitment, None, now or utcnow())
    db.commit()
    return list_reminders(db, commitment.id)


def add_snooze(
    db: Session,
    user_id: int,
    commitment_id: int,
    scheduled_at: dt.datetime,
    now: dt.datetime | None = None,
) -> Reminder | None:
    commitment = get_commitment(db, user_id, commitment_id)
    if not commitment:
        return None
    if commitment.status != CommitmentStatus.ACTIVE:
        raise rules.ReminderRuleError(rules.COMMITMENT_NOT_ACTIVE)
    now = now or utcnow()
    rules.check_new_reminder(
        list_reminders(db, commitment.id),
        scheduled_at,
        source=ReminderSource.SNOOZE,
        target_at=commitment.target_at,
        now=now,
    )
    reminder = Reminder(
        commitment_id=commitment.id,
        scheduled_at=scheduled_at,
        status=ReminderStatus.PENDING,
        source=ReminderSource.SNOOZE,
        created_at=now,
    )
    db.add(reminder)
    db.commit()
    db.refresh(reminder)
    return reminder


def reschedule_reminder(
    db: Session,
    user_id: int,
    reminder_id: int,
    scheduled_at: dt.datetime,
    now: dt.datetime | None = None,
) -> Reminder | None:
    reminder = get_reminder(db, user_id, reminder_id)
    if not reminder:
        return None
    commitment = reminder.commitment
    if commitment.status != CommitmentStatus.ACTIVE:
        raise rules.ReminderRuleError(rules.COMMITMENT_NOT_ACTIVE)
    rules.check_reschedule(
        list_reminders(db, commitment.id),
        reminder,
        scheduled_at,
        target_at=commitment.target_at,
        now=now,
    )
    reminder.scheduled_at = scheduled_at
    db.add(reminder)
    db.commit()
    db.refresh(reminder)
    return reminder


def delete_reminder(db: Session, user_id: int, reminder_id: int) -> bool:
    reminder = get_reminder(db, user_id, reminder_id)
    if not reminder:
        return False
    db.delete(reminder)
    db.commit()
    return True
