from __future__ import annotations

from fastapi import APIRouter

from taskai.domain.templates import TEMPLATES
from taskai.schemas.commitments import TemplateOut

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("", response_model=list[TemplateOut])
def list_templates():
    return [TemplateOut.model_validate(t) for t in TEMPLATES]
