from __future__ import annotations

import datetime as dt
from pydantic import BaseModel, field_validator

from taskai.schemas.common import normalize_dt


class ReminderOut(BaseModel):
    id: int
    commitment_id: int
    scheduled_at: dt.datetime
    status: str
    source: str
    created_at: dt.datetime

    class Config:
        from_attributes = True


class SnoozeCreate(BaseModel):
    scheduled_at: dt.datetime

    @field_validator("scheduled_at")
    @classmethod
    def _when(cls, v: dt.datetime) -> dt.datetime:
        return normalize_dt(v)


class ReminderReschedule(BaseModel):
    scheduled_at: dt.datetime

    @field_validator("scheduled_at")
    @classmethod
    def _when(cls, v: dt.datetime) -> dt.datetime:
        return normalize_dt(v)
