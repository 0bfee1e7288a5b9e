import datetime as dt
from sqlalchemy import Boolean, String, DateTime, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskai.domain.dates import utcnow
from .base import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("token_hash", name="uq_users_token_hash"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    email: Mapped[str] = mapped_column(String(254), index=True)
    name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    password_hash: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    has_seen_onboarding: Mapped[bool] = mapped_column(Boolean, default=False)

    # Session token (only the hash is stored)
    token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    token_hint: Mapped[str | None] = mapped_column(String(12), nullable=True)
    token_issued_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)
    token_expires_at: Mapped[dt.datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=utcnow)

    commitments = relationship("Commitment", back_populates="user", cascade="all, delete-orphan")
