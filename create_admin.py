#!/usr/bin/env python3
"""
Create an administrator account, or promote an existing one

Usage:
    python create_admin.py admin@example.com 'Sup3rSecret'

Admins can seed upcoming days (POST /api/add_days) and delete any user.
"""

import argparse
import logging
import sys

from apps.shared.auth import hash_password
from apps.shared.clock import Clock
from apps.shared.database import SessionLocal, Base, engine
from apps.shared.errors import ApiError
from apps.users import repository, service
from apps.users.models import User, ROLE_ADMIN, ROLE_USER
import apps.days.models  # noqa: F401  registers the day tables

logger = logging.getLogger("create-admin")


def create_admin(db, email: str, password: str, now) -> User:
    """Create the admin user, or add ROLE_ADMIN to an existing account."""
    user = repository.get_user_by_email(db, email)
    if user:
        if ROLE_ADMIN not in (user.roles or []):
            user.roles = list(user.roles or []) + [ROLE_ADMIN]
            db.commit()
        logger.info(f"Promoted existing user {user.id} to admin")
        return user

    service.check_email(email)
    service.check_password(password)
    user = User(
        email=email,
        password=hash_password(password),
        register_date=now,
        roles=[ROLE_USER, ROLE_ADMIN],
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created admin user {user.id}")
    return user


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("email")
    parser.add_argument("password")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        create_admin(db, args.email, args.password, Clock().now())
    except ApiError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
