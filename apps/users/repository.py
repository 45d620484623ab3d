"""
User queries
"""

from datetime import date
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from apps.days import repository as days_repository
from apps.users.models import User


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def get_user_by_reset_token(db: Session, token: str) -> Optional[User]:
    return db.query(User).filter(User.reset_token == token).first()


def mark_voted(db: Session, user_id: int, today: date) -> bool:
    """
    Set last_vote_date to today unless it already is.

    Returns False when the user has already voted today, so two
    concurrent votes from the same user cannot both succeed.
    """
    updated = (
        db.query(User)
        .filter(
            User.id == user_id,
            or_(User.last_vote_date.is_(None), User.last_vote_date != today),
        )
        .update({User.last_vote_date: today}, synchronize_session=False)
    )
    return updated == 1


def delete_user(db: Session, user: User) -> None:
    """Delete a user together with its vote rows."""
    days_repository.delete_votes_for_user(db, user.id)
    db.delete(user)
