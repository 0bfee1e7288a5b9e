import datetime as dt
from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskai.domain.constants import ReminderSource, ReminderStatus
from taskai.domain.dates import utcnow
from .base import Base


class Reminder(Base):
    __tablename__ = "reminders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    commitment_id: Mapped[int] = mapped_column(ForeignKey("commitments.id", ondelete="CASCADE"), index=True)
    scheduled_at: Mapped[dt.datetime] = mapped_column(DateTime, index=True)
    # status: pending | sent | cancelled | snoozed
    status: Mapped[str] = mapped_column(String(20), default=ReminderStatus.PENDING, index=True)
    # source: ladder (generated) | snooze (user-added)
    source: Mapped[str] = mapped_column(String(20), default=ReminderSource.LADDER)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)

    commitment = relationship("Commitment", back_populates="reminders")
