"""
Account and voting flows

Registration, login, deletion, password reset, and the daily vote for
one of tomorrow's themes. The authenticated user is always passed in.
"""

import os
import re
import logging
import secrets
from datetime import date, datetime, timedelta
from typing import List

from email_validator import validate_email, EmailNotValidError
from sqlalchemy.orm import Session

from apps.shared.auth import create_access_token, hash_password, verify_password
from apps.shared.errors import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from apps.days import repository as days_repository
from apps.users import repository
from apps.users.mailer import Mailer
from apps.users.models import User, ROLE_USER

logger = logging.getLogger(__name__)

PASSWORD_RESET_URL = os.getenv("PASSWORD_RESET_URL", "http://localhost:3000/reset-password/")
RESET_TOKEN_BYTES = 32
RESET_TOKEN_LIFETIME = timedelta(hours=1)

PASSWORD_POLICY_MESSAGE = (
    "Password must be at least 8 characters long and include at least one uppercase letter and one number"
)


def check_email(email: str) -> None:
    try:
        validate_email(email or "", check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("Invalid email address")


def check_password(password: str) -> None:
    if (
        not password
        or len(password) < 8
        or not re.search(r"[A-Z]", password)
        or not re.search(r"[0-9]", password)
    ):
        raise ValidationError(PASSWORD_POLICY_MESSAGE)


def register(db: Session, email: str, password: str, now: datetime) -> User:
    check_email(email)
    check_password(password)

    if repository.get_user_by_email(db, email):
        raise ConflictError("Email already used")

    user = User(
        email=email,
        password=hash_password(password),
        register_date=now,
        roles=[ROLE_USER],
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"Registered user {user.id}")
    return user


def authenticate(db: Session, email: str, password: str) -> str:
    """Exchange credentials for an access token."""
    user = repository.get_user_by_email(db, email)
    if not user or not verify_password(password, user.password):
        raise AuthenticationError("Invalid credentials.")
    return create_access_token(user)


def delete_user(db: Session, current_user: User, user_id: int) -> None:
    if not user_id:
        raise ValidationError("User ID is required")

    user_to_delete = repository.get_user(db, user_id)
    if not user_to_delete:
        raise NotFoundError("User not found")

    if not (current_user.is_admin() or current_user.id == user_to_delete.id):
        raise ForbiddenError("You are not allowed to delete this user")

    repository.delete_user(db, user_to_delete)
    db.commit()
    logger.info(f"User {current_user.id} deleted user {user_id}")


def vote(db: Session, current_user: User, theme_id: int, today: date) -> None:
    """
    Cast the user's daily vote for one of tomorrow's themes.

    The vote date, the voter row and the vote count are committed together.
    """
    if current_user.last_vote_date == today:
        raise ForbiddenError("User has already voted today")

    if not theme_id:
        raise ValidationError("Theme ID is required")

    theme = days_repository.get_theme(db, theme_id)
    if not theme:
        raise NotFoundError("Theme not found")

    tomorrow = today + timedelta(days=1)
    day = days_repository.get_theme_day(db, theme)
    if not day or day.day_date != tomorrow:
        raise ValidationError("Theme is not for tomorrow")

    if not repository.mark_voted(db, current_user.id, today):
        db.rollback()
        raise ForbiddenError("User has already voted today")

    try:
        days_repository.add_voter(db, current_user.id, theme.id)
        days_repository.increment_theme_votes(db, theme.id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"User {current_user.id} voted for theme {theme.id}")


def themes_for_tomorrow(db: Session, current_user: User, today: date) -> List[dict]:
    if current_user.last_vote_date == today:
        raise ValidationError("User has already voted today for tomorrow")

    tomorrow = today + timedelta(days=1)
    day_tomorrow = days_repository.get_day_by_date(db, tomorrow)
    if not day_tomorrow:
        raise NotFoundError("No themes available for tomorrow")

    themes = days_repository.get_themes_for_day(db, day_tomorrow.id)
    return [theme.to_dict() for theme in sorted(themes, key=lambda theme: theme.id)]


def request_password_reset(db: Session, email: str, now: datetime, mailer: Mailer) -> None:
    if not email:
        raise ValidationError("Email address is required")

    user = repository.get_user_by_email(db, email)
    if not user:
        raise NotFoundError("Email address not found")

    reset_token = secrets.token_hex(RESET_TOKEN_BYTES)
    reset_url = f"{PASSWORD_RESET_URL}{reset_token}"

    # The token is only stored once the mail has gone out
    try:
        user.reset_token = reset_token
        user.reset_token_expires_at = now + RESET_TOKEN_LIFETIME
        mailer.send(
            to=user.email,
            subject="Your password reset request",
            html=f"Please click on the following link to reset your password: <a href='{reset_url}'>Reset Password</a>",
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Password reset requested for user {user.id}")


def reset_password(db: Session, token: str, new_password: str, now: datetime) -> None:
    user = repository.get_user_by_reset_token(db, token)
    if not user or user.reset_token_expires_at is None or user.reset_token_expires_at < now:
        raise ValidationError("Invalid or expired token")

    check_password(new_password)

    user.password = hash_password(new_password)
    user.reset_token = None
    user.reset_token_expires_at = None
    db.commit()
    logger.info(f"Password reset for user {user.id}")
