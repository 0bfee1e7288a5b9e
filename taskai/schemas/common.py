from __future__ import annotations

import datetime as dt

from taskai.domain.dates import to_naive_utc


def validate_enum_str(value: str | None, allowed: set[str], field_name: str) -> str | None:
    if value is None:
        return None
    v = value.strip().lower()
    if v not in allowed:
        raise ValueError(f"{field_name} must be one of: {sorted(allowed)}")
    return v


def normalize_dt(value: dt.datetime | None) -> dt.datetime | None:
    return to_naive_utc(value)


def strip_required(value: str | None, field_name: str) -> str | None:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError(f"{field_name} must not be empty")
    return value
