from __future__ import annotations

import datetime as dt
from pydantic import BaseModel, Field, field_validator


class FramingIn(BaseModel):
    text: str = Field(min_length=1, max_length=4000)

    @field_validator("text")
    @classmethod
    def _text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("text must not be empty")
        return v


class CommitmentDraftOut(BaseModel):
    type: str
    title: str
    description: str | None = None
    target_at: dt.datetime | None = None
    framed_by: str
