"""
JWT Authentication

Password hashing, access token issuance, and FastAPI dependencies that
resolve the authenticated user from an Authorization: Bearer header.
"""

import os
import logging
from datetime import datetime, timedelta, timezone

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from apps.shared.database import get_db
from apps.shared.errors import AuthenticationError, ForbiddenError
from apps.users.models import User, ROLE_ADMIN

# Setup logging
logger = logging.getLogger(__name__)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
ALGORITHM = "HS256"

DEV_SECRET_KEY = "dev-only-insecure-secret"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/login", auto_error=False)


def _get_secret_key() -> str:
    if not JWT_SECRET_KEY:
        if ENVIRONMENT == "production":
            raise RuntimeError(
                "JWT_SECRET_KEY must be set in production. "
                "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
            )
        logger.warning(
            "JWT_SECRET_KEY not set - signing tokens with a development secret. "
            "Set JWT_SECRET_KEY environment variable for security."
        )
        return DEV_SECRET_KEY
    return JWT_SECRET_KEY


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(user: User) -> str:
    """Issue a signed access token identifying the user by email."""
    data = {
        "sub": user.email,
        "roles": list(user.roles or []),
        "exp": datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(data, _get_secret_key(), algorithm=ALGORITHM)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency resolving the authenticated user

    Usage in endpoints:
    @router.post("/protected")
    def protected_endpoint(current_user: User = Depends(get_current_user)):
        pass
    """
    if not token:
        raise AuthenticationError("Not authenticated")

    try:
        payload = jwt.decode(token, _get_secret_key(), algorithms=[ALGORITHM])
    except JWTError:
        raise AuthenticationError("Could not validate credentials")

    email = payload.get("sub")
    if email is None:
        raise AuthenticationError("Could not validate credentials")

    user = db.query(User).filter(User.email == email).first()
    if user is None:
        raise AuthenticationError("Could not validate credentials")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if ROLE_ADMIN not in (current_user.roles or []):
        raise ForbiddenError("Only admin can access this endpoint")
    return current_user
