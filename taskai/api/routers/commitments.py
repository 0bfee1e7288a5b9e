from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from taskai import crud
from taskai.api.deps import enforce_rate_limit, require_api_key
from taskai.db import get_db
from taskai.domain.constants import COMMITMENT_STATUS_VALUES, CommitmentStatus
from taskai.domain.dates import utcnow
from taskai.domain.ladder import generate_ladder
from taskai.domain.rules import InvalidTransition, ReminderRuleError
from taskai.models.commitment import Commitment
from taskai.schemas.commitments import (
    CommitmentCreate,
    CommitmentDetail,
    CommitmentListItem,
    CommitmentOut,
    CommitmentUpdate,
    LadderPreviewIn,
    LadderPreviewOut,
    ScheduleIn,
)
from taskai.schemas.reminders import ReminderOut
from taskai.services.overview import build_list
from taskai.settings import settings

router = APIRouter(prefix="/commitments", tags=["commitments"], dependencies=[Depends(require_api_key)])

NOT_FOUND = "Task not found"


@router.post("", response_model=CommitmentOut, status_code=201)
def create_commitment(payload: CommitmentCreate, db: Session = Depends(get_db), user=Depends(enforce_rate_limit)):
    try:
        return crud.create_commitment(db, user.id, payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("", response_model=list[CommitmentListItem])
def list_commitments(
    status: str = Query(CommitmentStatus.ACTIVE, description="active|done|expired"),
    order: str = Query("target", description="target|urgency"),
    db: Session = Depends(get_db),
    user=Depends(enforce_rate_limit),
):
    if status not in COMMITMENT_STATUS_VALUES:
        raise HTTPException(status_code=422, detail=f"status must be one of: {sorted(COMMITMENT_STATUS_VALUES)}")
    if order not in ("target", "urgency"):
        raise HTTPException(status_code=422, detail="order must be one of: ['target', 'urgency']")
    commitments = crud.list_commitments(db, user.id, status)
    reminders = crud.list_reminders_for_user(db, user.id)
    return build_list(commitments, reminders, order=order)


@router.post("/ladder-preview", response_model=LadderPreviewOut)
def ladder_preview(payload: LadderPreviewIn, user=Depends(enforce_rate_limit)):
    now = utcnow()
    draft = Commitment(
        type=payload.type,
        target_at=payload.target_at,
        status=CommitmentStatus.ACTIVE,
        created_at=now,
    )
    dates = generate_ladder(draft, payload.target_at or now, now)
    return LadderPreviewOut(reminder_dates=dates[: settings.MAX_PENDING_REMINDERS])


@router.get("/{commitment_id}", response_model=CommitmentDetail)
def get_commitment(commitment_id: int, db: Session = Depends(get_db), user=Depends(enforce_rate_limit)):
    commitment = crud.get_commitment(db, user.id, commitment_id)
    if not commitment:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    base = CommitmentOut.model_validate(commitment).model_dump()
    reminders = [ReminderOut.model_validate(r) for r in crud.list_reminders(db, commitment.id)]
    return CommitmentDetail(**base, reminders=reminders)


@router.patch("/{commitment_id}", response_model=CommitmentOut)
def patch_commitment(
    commitment_id: int,
    payload: CommitmentUpdate,
    db: Session = Depends(get_db),
    user=Depends(enforce_rate_limit),
):
    try:
        commitment = crud.update_commitment(db, user.id, commitment_id, payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not commitment:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return commitment


@router.delete("/{commitment_id}")
def delete_commitment(commitment_id: int, db: Session = Depends(get_db), user=Depends(enforce_rate_limit)):
    if not crud.delete_commitment(db, user.id, commitment_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"ok": True}


@router.post("/{commitment_id}/done", response_model=CommitmentOut)
def mark_done(commitment_id: int, db: Session = Depends(get_db), user=Depends(enforce_rate_limit)):
    try:
        commitment = crud.mark_commitment_done(db, user.id, commitment_id)
    except InvalidTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    if not commitment:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return commitment


@router.put("/{commitment_id}/schedule", response_model=list[ReminderOut])
def replace_schedule(
    commitment_id: int,
    payload: ScheduleIn,
    db: Session = Depends(get_db),
    user=Depends(enforce_rate_limit),
):
    try:
        reminders = crud.replace_schedule(db, user.id, commitment_id, payload.reminder_dates)
    except ReminderRuleError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if reminders is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return reminders


@router.post("/{commitment_id}/reminders/regenerate", response_model=list[ReminderOut])
def regenerate_reminders(commitment_id: int, db: Session = Depends(get_db), user=Depends(enforce_rate_limit)):
    reminders = crud.regenerate_reminders(db, user.id, commitment_id)
    if reminders is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return reminders
