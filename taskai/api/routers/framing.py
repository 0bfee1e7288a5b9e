from __future__ import annotations

from fastapi import APIRouter, Depends

from taskai.api.deps import enforce_rate_limit, require_api_key
from taskai.schemas.framing import CommitmentDraftOut, FramingIn
from taskai.services.framing import frame_commitment

router = APIRouter(prefix="/framing", tags=["framing"], dependencies=[Depends(require_api_key)])


@router.post("", response_model=CommitmentDraftOut)
def frame(payload: FramingIn, user=Depends(enforce_rate_limit)):
    draft = frame_commitment(payload.text)
    return CommitmentDraftOut(
        type=draft.type,
        title=draft.title,
        description=draft.description,
        target_at=draft.target_at,
        framed_by=draft.framed_by,
    )
