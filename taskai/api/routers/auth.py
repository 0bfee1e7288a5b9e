from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from taskai import crud
from taskai.abuse import get_sign_in_tracker
from taskai.api.deps import get_current_user, require_api_key
from taskai.db import get_db
from taskai.schemas.auth import SessionOut, SignInIn, SignUpIn, UserOut

router = APIRouter(prefix="/auth", tags=["auth"], dependencies=[Depends(require_api_key)])

logger = logging.getLogger("taskai_api")


def _session_for(db: Session, user) -> SessionOut:
    token = crud.issue_session_token(db, user.id)
    db.refresh(user)
    return SessionOut(user=UserOut.model_validate(user), token=token, expires_at=user.token_expires_at)


@router.post("/sign-up", response_model=SessionOut, status_code=201)
def sign_up(payload: SignUpIn, db: Session = Depends(get_db)):
    user = crud.create_user(db, payload.email, payload.password, payload.name)
    if not user:
        raise HTTPException(status_code=409, detail="Email is already registered")
    logger.info("User signed up id=%s", user.id)
    return _session_for(db, user)


@router.post("/sign-in", response_model=SessionOut)
def sign_in(payload: SignInIn, db: Session = Depends(get_db)):
    tracker = get_sign_in_tracker()
    block = tracker.check(payload.email)
    if block.blocked:
        raise HTTPException(
            status_code=429,
            detail="Too many failed sign-in attempts",
            headers={"Retry-After": str(block.retry_after)},
        )
    user = crud.authenticate_user(db, payload.email, payload.password)
    if not user:
        tracker.record_failure(payload.email)
        logger.warning("Sign in failed for %s", payload.email)
        raise HTTPException(status_code=401, detail="Sign in failed")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User is inactive")
    tracker.clear(payload.email)
    return _session_for(db, user)


@router.post("/sign-out")
def sign_out(db: Session = Depends(get_db), user=Depends(get_current_user)):
    crud.revoke_session_token(db, user.id)
    return {"ok": True}


@router.get("/session", response_model=UserOut)
def current_session(user=Depends(get_current_user)):
    return user


@router.post("/onboarding/complete", response_model=UserOut)
def complete_onboarding(db: Session = Depends(get_db), user=Depends(get_current_user)):
    updated = crud.mark_onboarding_seen(db, user.id)
    if not updated:
        raise HTTPException(status_code=404, detail="User not found")
    return updated
