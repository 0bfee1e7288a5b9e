from __future__ import annotations

from dataclasses import dataclass

from taskai.domain.constants import CommitmentType


@dataclass(frozen=True)
class Template:
    id: str
    name: str
    type: str
    default_title: str
    default_days: int | None = None


TEMPLATES: tuple[Template, ...] = (
    Template("passport", "Passport", CommitmentType.EXPIRATION, "Passport Renewal", 365),
    Template("insurance", "Insurance", CommitmentType.EXPIRATION, "Insurance Renewal", 365),
    Template("warranty", "Warranty", CommitmentType.EXPIRATION, "Warranty Expires", 365),
    Template("custom", "Custom", CommitmentType.DEADLINE, ""),
)

_BY_ID = {t.id: t for t in TEMPLATES}


def get_template(template_id: str | None) -> Template | None:
    if not template_id:
        return None
    return _BY_ID.get(template_id.strip().lower())
