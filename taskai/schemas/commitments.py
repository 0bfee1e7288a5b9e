from __future__ import annotations

import datetime as dt
from pydantic import BaseModel, Field, field_validator, model_validator

from taskai.domain.constants import COMMITMENT_TYPE_VALUES, CommitmentType
from taskai.domain.dates import utcnow
from taskai.schemas.common import normalize_dt, strip_required, validate_enum_str
from taskai.schemas.reminders import ReminderOut


TARGET_DATE_REQUIRED = "Target date is required"
TARGET_DATE_FUTURE = "Target date must be in the future"


def _check_target(type_: str | None, target_at: dt.datetime | None) -> dt.datetime | None:
    if type_ == CommitmentType.OPEN:
        return None
    if target_at is not None and target_at.date() < utcnow().date():
        raise ValueError(TARGET_DATE_FUTURE)
    return target_at


class CommitmentCreate(BaseModel):
    type: str | None = Field(default=None, description="expiration|deadline|open")
    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    target_at: dt.datetime | None = None
    next_review_at: dt.datetime | None = None

    template_id: str | None = Field(default=None, max_length=40)
    # When set, replaces the generated ladder (user-edited schedule)
    reminder_dates: list[dt.datetime] | None = None

    @field_validator("type")
    @classmethod
    def _type(cls, v: str | None) -> str | None:
        return validate_enum_str(v, COMMITMENT_TYPE_VALUES, "type")

    @field_validator("title")
    @classmethod
    def _title(cls, v: str | None) -> str | None:
        return strip_required(v, "title")

    @field_validator("description")
    @classmethod
    def _description(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None

    @field_validator("target_at", "next_review_at")
    @classmethod
    def _dates(cls, v: dt.datetime | None) -> dt.datetime | None:
        return normalize_dt(v)

    @field_validator("reminder_dates")
    @classmethod
    def _reminder_dates(cls, v: list[dt.datetime] | None) -> list[dt.datetime] | None:
        if v is None:
            return v
        return [normalize_dt(d) for d in v]

    @model_validator(mode="after")
    def _validate(self) -> "CommitmentCreate":
        if self.template_id is None:
            if self.type is None:
                raise ValueError("type is required")
            if self.title is None:
                raise ValueError("Title is required")
            if self.type != CommitmentType.OPEN and self.target_at is None:
                raise ValueError(TARGET_DATE_REQUIRED)
        self.target_at = _check_target(self.type, self.target_at)
        if self.type not in (None, CommitmentType.OPEN):
            self.next_review_at = None
        return self


class CommitmentUpdate(BaseModel):
    type: str | None = Field(default=None, description="expiration|deadline|open")
    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    target_at: dt.datetime | None = None
    next_review_at: dt.datetime | None = None
    reminder_dates: list[dt.datetime] | None = None

    @field_validator("type")
    @classmethod
    def _type(cls, v: str | None) -> str | None:
        return validate_enum_str(v, COMMITMENT_TYPE_VALUES, "type")

    @field_validator("title")
    @classmethod
    def _title(cls, v: str | None) -> str | None:
        return strip_required(v, "title")

    @field_validator("target_at", "next_review_at")
    @classmethod
    def _dates(cls, v: dt.datetime | None) -> dt.datetime | None:
        return normalize_dt(v)

    @field_validator("reminder_dates")
    @classmethod
    def _reminder_dates(cls, v: list[dt.datetime] | None) -> list[dt.datetime] | None:
        if v is None:
            return v
        return [normalize_dt(d) for d in v]

    @model_validator(mode="after")
    def _validate(self) -> "CommitmentUpdate":
        for field in ("type", "title"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        if self.target_at is not None and self.target_at.date() < utcnow().date():
            raise ValueError(TARGET_DATE_FUTURE)
        return self


class CommitmentOut(BaseModel):
    id: int
    type: str
    title: str
    description: str | None
    target_at: dt.datetime | None
    status: str
    source: str
    next_review_at: dt.datetime | None
    created_at: dt.datetime
    updated_at: dt.datetime

    class Config:
        from_attributes = True


class CommitmentListItem(CommitmentOut):
    days_until: int | None = None
    urgency_band: str
    urgency_score: float
    urgency_reason: str
    next_reminder_at: dt.datetime | None = None


class CommitmentDetail(CommitmentOut):
    reminders: list[ReminderOut]


class LadderPreviewIn(BaseModel):
    type: str
    target_at: dt.datetime | None = None

    @field_validator("type")
    @classmethod
    def _type(cls, v: str) -> str:
        return validate_enum_str(v, COMMITMENT_TYPE_VALUES, "type")

    @field_validator("target_at")
    @classmethod
    def _target(cls, v: dt.datetime | None) -> dt.datetime | None:
        return normalize_dt(v)


class LadderPreviewOut(BaseModel):
    reminder_dates: list[dt.datetime]


class ScheduleIn(BaseModel):
    reminder_dates: list[dt.datetime]

    @field_validator("reminder_dates")
    @classmethod
    def _reminder_dates(cls, v: list[dt.datetime]) -> list[dt.datetime]:
        return [normalize_dt(d) for d in v]


class TemplateOut(BaseModel):
    id: str
    name: str
    type: str
    default_title: str
    default_days: int | None

    class Config:
        from_attributes = True
