from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from taskai import crud
from taskai.api.deps import enforce_rate_limit, require_api_key
from taskai.db import get_db
from taskai.domain.rules import ReminderRuleError
from taskai.schemas.reminders import ReminderOut, ReminderReschedule, SnoozeCreate

router = APIRouter(tags=["reminders"], dependencies=[Depends(require_api_key)])


@router.get("/commitments/{commitment_id}/reminders", response_model=list[ReminderOut])
def list_reminders(commitment_id: int, db: Session = Depends(get_db), user=Depends(enforce_rate_limit)):
    commitment = crud.get_commitment(db, user.id, commitment_id)
    if not commitment:
        raise HTTPException(status_code=404, detail="Task not found")
    return crud.list_reminders(db, commitment.id)


@router.post("/commitments/{commitment_id}/reminders", response_model=ReminderOut, status_code=201)
def add_snooze(
    commitment_id: int,
    payload: SnoozeCreate,
    db: Session = Depends(get_db),
    user=Depends(enforce_rate_limit),
):
    try:
        reminder = crud.add_snooze(db, user.id, commitment_id, payload.scheduled_at)
    except ReminderRuleError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not reminder:
        raise HTTPException(status_code=404, detail="Task not found")
    return reminder


@router.patch("/reminders/{reminder_id}", response_model=ReminderOut)
def reschedule_reminder(
    reminder_id: int,
    payload: ReminderReschedule,
    db: Session = Depends(get_db),
    user=Depends(enforce_rate_limit),
):
    try:
        reminder = crud.reschedule_reminder(db, user.id, reminder_id, payload.scheduled_at)
    except ReminderRuleError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not reminder:
        raise HTTPException(status_code=404, detail="Reminder not found")
    return reminder


@router.delete("/reminders/{reminder_id}")
def delete_reminder(reminder_id: int, db: Session = Depends(get_db), user=Depends(enforce_rate_limit)):
    if not crud.delete_reminder(db, user.id, reminder_id):
        raise HTTPException(status_code=404, detail="Reminder not found")
    return {"ok": True}
