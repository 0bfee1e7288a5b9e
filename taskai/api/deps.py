from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from taskai import crud
from taskai.db import get_db
from taskai.models.user import User
from taskai.rate_limit import get_request_quota
from taskai.settings import settings


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    if settings.API_KEY and x_api_key != settings.API_KEY:
        raise HTTPException(status_code=401, detail="Invalid API key")


def session_token(authorization: str | None, x_user_key: str | None) -> str | None:
    """Bearer token first, then the X-User-Key header."""
    scheme, _, value = (authorization or "").strip().partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    if x_user_key and x_user_key.strip():
        return x_user_key.strip()
    return None


def get_current_user(
    db: Session = Depends(get_db),
    authorization: str | None = Header(default=None, alias="Authorization"),
    x_user_key: str | None = Header(default=None, alias="X-User-Key"),
) -> User:
    token = session_token(authorization, x_user_key)
    if not token:
        raise HTTPException(status_code=401, detail="Missing session token")
    try:
        user = crud.get_user_by_session_token(db, token)
    except RuntimeError:
        raise HTTPException(status_code=500, detail="Server auth is not configured")
    if not user:
        raise HTTPException(status_code=401, detail="Invalid or expired session token")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User is inactive")
    return user


def enforce_rate_limit(user: User = Depends(get_current_user)) -> User:
    result = get_request_quota().check(
        user.id, settings.API_RATE_LIMIT_PER_MIN, settings.API_RATE_WINDOW_SEC
    )
    if not result.allowed:
        raise HTTPException(
            status_code=429,
            detail="Too many requests",
            headers={"Retry-After": str(result.retry_after)},
        )
    return user
