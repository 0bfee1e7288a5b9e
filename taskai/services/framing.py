"""Turn a free-text note ("passport expires 2027-03-01") into a commitment draft.

The draft only pre-fills the add form; nothing is stored here. With an OpenAI
key configured the chat model frames the text, otherwise (or when the model
call fails) a small rule-based parser does.
"""

from __future__ import annotations

import datetime as dt
import json
import logging
import re
import time
from collections import deque
from dataclasses import dataclass

from openai import OpenAI

from taskai.domain.constants import COMMITMENT_TYPE_VALUES, CommitmentType
from taskai.domain.dates import utcnow
from taskai.settings import settings

logger = logging.getLogger("taskai.framing")

ISO_DATE_RE = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")
IN_PERIOD_RE = re.compile(r"\bin\s+(\d{1,3})\s+(days?|weeks?|months?|years?)\b", re.IGNORECASE)
MONTH_NAME = (
    r"(jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)(?:\.|\b)"
)
DAY_MONTH_RE = re.compile(
    r"\b(\d{1,2})(?:st|nd|rd|th)?\s+" + MONTH_NAME + r"(?:\s+(\d{4})\b)?",
    re.IGNORECASE,
)
MONTH_DAY_RE = re.compile(
    r"\b" + MONTH_NAME + r"\s+(\d{1,2})(?:st|nd|rd|th)?\b(?:,?\s+(\d{4})\b)?",
    re.IGNORECASE,
)
RELATIVE_WORDS = {
    "today": 0,
    "tomorrow": 1,
    "next week": 7,
    "next month": 30,
}
FILLER_RE = re.compile(
    r"^(?:please\s+)?(?:remind me (?:to|about|that)|i need to|i have to|need to|don't forget to|todo:?)\s+",
    re.IGNORECASE,
)
CONNECTOR_RE = re.compile(r"\s+(?:on|by|before|until|in|at)\s*$", re.IGNORECASE)

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}
PERIOD_DAYS = {"day": 1, "week": 7, "month": 30, "year": 365}

EXPIRATION_WORDS = (
    "expire", "expires", "expiring", "expiry", "expiration", "renew", "renewal",
    "warranty", "passport", "insurance", "licence", "license", "subscription", "lease",
)
DEADLINE_WORDS = ("due", "deadline", "submit", "finish", "complete", "file", "pay", "send", "by")


@dataclass(frozen=True)
class CommitmentDraft:
    type: str
    title: str
    description: str | None
    target_at: dt.datetime | None
    framed_by: str


class FramingGuard:
    """Text-length limit plus a circuit breaker around the model call."""

    def __init__(self) -> None:
        self._errors: deque[float] = deque()
        self._open_until: float | None = None

    def allows(self, text: str) -> bool:
        if len(text) > settings.AI_MAX_TEXT_CHARS:
            return False
        now = time.monotonic()
        if self._open_until is not None:
            if now < self._open_until:
                return False
            self._open_until = None
        return True

    def record_error(self) -> None:
        now = time.monotonic()
        self._errors.append(now)
        while self._errors and now - self._errors[0] > settings.AI_ERROR_WINDOW_SEC:
            self._errors.popleft()
        if len(self._errors) >= settings.AI_ERROR_THRESHOLD:
            self._open_until = now + settings.AI_COOLDOWN_SEC
            self._errors.clear()
            logger.warning("AI framing disabled for %ss after repeated errors", settings.AI_COOLDOWN_SEC)

    def reset(self) -> None:
        self._errors.clear()
        self._open_until = None


_guard = FramingGuard()


def guard() -> FramingGuard:
    return _guard


def _roll_year(month: int, day: int, year: str | None, now: dt.datetime) -> dt.date | None:
    try:
        if year:
            return dt.date(int(year), month, day)
        candidate = dt.date(now.year, month, day)
        if candidate < now.date():
            candidate = dt.date(now.year + 1, month, day)
        return candidate
    except ValueError:
        return None


def _iso_date(value: str) -> dt.date | None:
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        return None


def _find_date(text: str, now: dt.datetime) -> tuple[dt.date | None, str]:
    """Return the first date found and the text with that phrase removed."""
    m = ISO_DATE_RE.search(text)
    found = _iso_date(m.group(1)) if m else None
    if found:
        return found, text[: m.start()] + text[m.end():]

    m = IN_PERIOD_RE.search(text)
    if m:
        unit = m.group(2).lower().rstrip("s")
        days = int(m.group(1)) * PERIOD_DAYS[unit]
        return now.date() + dt.timedelta(days=days), text[: m.start()] + text[m.end():]

    for regex, month_group, day_group in ((DAY_MONTH_RE, 2, 1), (MONTH_DAY_RE, 1, 2)):
        m = regex.search(text)
        if m:
            month = MONTHS[m.group(month_group).lower()[:3]]
            found = _roll_year(month, int(m.group(day_group)), m.group(3), now)
            if found:
                return found, text[: m.start()] + text[m.end():]

    lower = text.lower()
    for phrase, offset in RELATIVE_WORDS.items():
        idx = lower.find(phrase)
        if idx != -1:
            return now.date() + dt.timedelta(days=offset), text[:idx] + text[idx + len(phrase):]

    return None, text


def _infer_type(text: str, has_date: bool) -> str:
    words = set(re.findall(r"[a-z']+", text.lower()))
    if any(w in words for w in EXPIRATION_WORDS):
        return CommitmentType.EXPIRATION
    if has_date or any(w in words for w in DEADLINE_WORDS):
        return CommitmentType.DEADLINE
    return CommitmentType.OPEN


def _clean_title(text: str) -> str:
    title = " ".join(text.split())
    title = FILLER_RE.sub("", title)
    title = CONNECTOR_RE.sub("", title).strip(" ,.;:-")
    if not title:
        return "Untitled"
    return (title[0].upper() + title[1:])[:100]


def parse_commitment_text(text: str, now: dt.datetime | None = None) -> CommitmentDraft:
    now = now or utcnow()
    found, rest = _find_date(text, now)
    type_ = _infer_type(text, found is not None)
    target_at = None
    if found and type_ != CommitmentType.OPEN:
        target_at = dt.datetime.combine(found, dt.time(9, 0))
    return CommitmentDraft(
        type=type_,
        title=_clean_title(rest),
        description=None,
        target_at=target_at,
        framed_by="rules",
    )


def _get_client(api_key: str | None) -> OpenAI | None:
    if not api_key:
        return None
    return OpenAI(api_key=api_key)


def frame_with_ai(text: str, api_key: str | None, model: str, now: dt.datetime | None = None) -> CommitmentDraft | None:
    client = _get_client(api_key)
    if not client:
        return None
    now = now or utcnow()

    system = (
        "You turn a short note into a tracked commitment. "
        f"Today is {now.date().isoformat()}. "
        "Return a JSON object with keys: type, title, description, target_date. "
        "type is one of: expiration (something that expires or must be renewed), "
        "deadline (something due by a date), open (no date, reviewed periodically). "
        "title is at most 100 characters. description may be null. "
        "target_date is YYYY-MM-DD or null; it must be null when type is open. "
        "Always return valid JSON. No extra keys."
    )
    resp = client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": system},
            {"role": "user", "content": text},
        ],
        response_format={"type": "json_object"},
    )
    data = json.loads(resp.choices[0].message.content or "")
    if not isinstance(data, dict):
        return None

    type_ = str(data.get("type", "")).strip().lower()
    title = str(data.get("title") or "").strip()
    if type_ not in COMMITMENT_TYPE_VALUES or not title:
        return None

    target_at = None
    raw_date = data.get("target_date")
    if raw_date and type_ != CommitmentType.OPEN:
        target_at = dt.datetime.combine(dt.date.fromisoformat(str(raw_date)), dt.time(9, 0))
    description = data.get("description")
    return CommitmentDraft(
        type=type_,
        title=title[:100],
        description=str(description)[:500] if description else None,
        target_at=target_at,
        framed_by="ai",
    )


def frame_commitment(text: str, now: dt.datetime | None = None) -> CommitmentDraft:
    now = now or utcnow()
    if settings.OPENAI_API_KEY and guard().allows(text):
        try:
            draft = frame_with_ai(text, settings.OPENAI_API_KEY, settings.OPENAI_CHAT_MODEL, now)
        except Exception as exc:  # noqa: BLE001
            logger.warning("AI framing failed, using rules: %s", exc)
            guard().record_error()
            draft = None
        if draft:
            return draft
    return parse_commitment_text(text, now)
