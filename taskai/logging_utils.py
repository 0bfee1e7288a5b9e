from __future__ import annotations

import logging
import re

from taskai.settings import settings


_TOKEN_PATTERNS = [
    re.compile(r"(Authorization:\s*Bearer\s+)(\S+)", re.IGNORECASE),
    re.compile(r"(X-User-Key:\s*)(\S+)", re.IGNORECASE),
    re.compile(r"(\"?password\"?\s*[:=]\s*\"?)([^\s\",}]+)", re.IGNORECASE),
    re.compile(r"\b(tk_)([A-Za-z0-9_\-]{8,})"),
]


def redact_text(text: str) -> str:
    redacted = text
    for pattern in _TOKEN_PATTERNS:
        redacted = pattern.sub(r"\1<redacted>", redacted)
    return redacted


def _redact_value(value):
    return redact_text(value) if isinstance(value, str) else value


class RedactFilter(logging.Filter):
    """Masks session tokens and passwords in log messages and their args."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact_text(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(_redact_value(arg) for arg in record.args)
        elif isinstance(record.args, dict):
            record.args = {key: _redact_value(value) for key, value in record.args.items()}
        return True


def configure_logging(name: str) -> logging.Logger:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    redact = RedactFilter()
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RedactFilter) for f in handler.filters):
            handler.addFilter(redact)
    return logging.getLogger(name)
