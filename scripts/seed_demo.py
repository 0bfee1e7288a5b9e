"""Seed a demo account with a handful of commitments.

Usage: python scripts/seed_demo.py [email] [password]
"""

from __future__ import annotations

import datetime as dt
import sys

from taskai import crud
from taskai.db import session_scope
from taskai.domain.constants import CommitmentSource, CommitmentStatus, CommitmentType
from taskai.domain.dates import utcnow
from taskai.domain.ladder import generate_reminders_from_commitment
from taskai.models.commitment import Commitment
from taskai.models.reminder import Reminder

DEMO_COMMITMENTS = [
    # title, type, target offset (days), status, source, created offset, next review offset
    ("Passport Renewal", CommitmentType.EXPIRATION, 45, CommitmentStatus.ACTIVE, CommitmentSource.TEMPLATE, -30, None),
    ("Car Insurance Renewal", CommitmentType.EXPIRATION, 180, CommitmentStatus.ACTIVE, CommitmentSource.TEMPLATE, -60, None),
    ("Laptop Warranty Expires", CommitmentType.EXPIRATION, -5, CommitmentStatus.EXPIRED, CommitmentSource.TEMPLATE, -365, None),
    ("Submit Tax Documents", CommitmentType.DEADLINE, -10, CommitmentStatus.DONE, CommitmentSource.MANUAL, -20, None),
    ("Complete Project Proposal", CommitmentType.DEADLINE, 10, CommitmentStatus.ACTIVE, CommitmentSource.MANUAL, -5, None),
    ("Review Insurance Options", CommitmentType.OPEN, None, CommitmentStatus.ACTIVE, CommitmentSource.MANUAL, -7, 7),
]


def _offset(now: dt.datetime, days: int | None) -> dt.datetime | None:
    return None if days is None else now + dt.timedelta(days=days)


def main() -> None:
    email = sys.argv[1] if len(sys.argv) > 1 else "demo@taskai.local"
    password = sys.argv[2] if len(sys.argv) > 2 else "demo-password"
    now = utcnow()

    with session_scope() as db:
        user = crud.get_user_by_email(db, email) or crud.create_user(db, email, password, "Demo")
        for title, type_, target, status, source, created, review in DEMO_COMMITMENTS:
            commitment = Commitment(
                user_id=user.id,
                type=type_,
                title=title,
                target_at=_offset(now, target),
                status=status,
                source=source,
                next_review_at=_offset(now, review),
                created_at=_offset(now, created),
                updated_at=_offset(now, created),
            )
            db.add(commitment)
            db.flush()
            for draft in generate_reminders_from_commitment(commitment, now):
                db.add(
                    Reminder(
                        commitment_id=commitment.id,
                        scheduled_at=draft.scheduled_at,
                        status=draft.status,
                        source=draft.source,
                        created_at=now,
                    )
                )
        db.commit()
        token = crud.issue_session_token(db, user.id)

    print(f"Seeded {len(DEMO_COMMITMENTS)} commitments for {email}")
    print(f"Session token: {token}")


if __name__ == "__main__":
    main()
