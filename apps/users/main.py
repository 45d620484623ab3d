"""
Account endpoints

Registration, login, deletion, the daily theme vote, and password reset.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from apps.shared.auth import create_access_token, get_current_user
from apps.shared.clock import Clock, get_clock
from apps.shared.database import get_db
from apps.users import service
from apps.users.mailer import Mailer, get_mailer
from apps.users.models import User
from apps.users.schemas import (
    Credentials,
    IdRequest,
    NewPassword,
    ResetRequest,
    SuccessResponse,
    TokenResponse,
)

router = APIRouter(tags=["users"])


# ──────────────────────────────────────────────────────────────────────────────
# Public endpoints (no auth required)
# ──────────────────────────────────────────────────────────────────────────────

@router.post("/register", response_model=TokenResponse)
def register(
    credentials: Credentials,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Create an account and return an access token for it."""
    user = service.register(db, credentials.email, credentials.password, clock.now())
    return {"token": create_access_token(user)}


@router.post("/login", response_model=TokenResponse)
def login(credentials: Credentials, db: Session = Depends(get_db)):
    """Exchange email and password for an access token."""
    token = service.authenticate(db, credentials.email or "", credentials.password or "")
    return {"token": token}


@router.post("/password/reset/request", response_model=SuccessResponse)
def request_password_reset(
    payload: ResetRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    mailer: Mailer = Depends(get_mailer),
):
    """Email a one-hour password reset link."""
    service.request_password_reset(db, payload.email, clock.now(), mailer)
    return {"success": "Password reset email sent"}


@router.post("/password/reset/{token}", response_model=SuccessResponse)
def reset_password(
    token: str,
    payload: NewPassword,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Set a new password using a reset token."""
    service.reset_password(db, token, payload.password, clock.now())
    return {"success": "Password reset successfully"}


# ──────────────────────────────────────────────────────────────────────────────
# Authenticated endpoints (Bearer token required)
# ──────────────────────────────────────────────────────────────────────────────

@router.delete("/user/delete", response_model=SuccessResponse)
def delete_user(
    payload: IdRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete an account. Allowed for the account owner and admins."""
    service.delete_user(db, current_user, payload.id)
    return {"success": "User deleted successfully"}


@router.post("/user/vote", response_model=SuccessResponse)
def vote(
    payload: IdRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    """Vote for one of tomorrow's themes, once per day."""
    service.vote(db, current_user, payload.id, clock.today())
    return {"success": "Vote added successfully"}


@router.get("/user/has_voted")
def has_voted(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    """List tomorrow's themes if the user can still vote today."""
    themes = service.themes_for_tomorrow(db, current_user, clock.today())
    return {"themes": themes}
