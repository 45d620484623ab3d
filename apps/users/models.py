"""
User models
Accounts, roles, vote bookkeeping and password-reset tokens
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, JSON

from apps.shared.database import Base

ROLE_USER = "ROLE_USER"
ROLE_ADMIN = "ROLE_ADMIN"


class User(Base):
    """
    A registered account

    - roles: list of role names, ROLE_USER for every account
    - last_vote_date: UTC date of the last vote; equal to today blocks voting
    - reset_token / reset_token_expires_at: single-use password reset token
    """
    __tablename__ = "user"

    id = Column(Integer, primary_key=True)
    email = Column(String(180), unique=True, nullable=False, index=True)
    roles = Column(JSON, nullable=False, default=list)
    password = Column(String(255), nullable=False)
    register_date = Column(DateTime, nullable=False)
    last_vote_date = Column(Date, nullable=True)
    reset_token = Column(String(255), nullable=True, index=True)
    reset_token_expires_at = Column(DateTime, nullable=True)

    def is_admin(self) -> bool:
        return ROLE_ADMIN in (self.roles or [])

