import datetime as dt
from sqlalchemy import String, DateTime, Integer, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskai.domain.constants import CommitmentSource, CommitmentStatus
from taskai.domain.dates import utcnow
from .base import Base


class Commitment(Base):
    __tablename__ = "commitments"
    __table_args__ = (
        Index("ix_commitments_user_status", "user_id", "status"),
        Index("ix_commitments_status_target_at", "status", "target_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    # type: expiration | deadline | open
    type: Mapped[str] = mapped_column(String(20))
    title: Mapped[str] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Null only for open-ended commitments
    target_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    # status: active | done | expired (done/expired are terminal)
    status: Mapped[str] = mapped_column(String(20), default=CommitmentStatus.ACTIVE)
    # source: template | manual
    source: Mapped[str] = mapped_column(String(20), default=CommitmentSource.MANUAL)
    next_review_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="commitments")
    reminders = relationship(
        "Reminder",
        back_populates="commitment",
        cascade="all, delete-orphan",
        order_by="Reminder.scheduled_at",
    )
