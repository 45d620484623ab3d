"""Shared pytest fixtures for the daily theme API tests."""

import os
import random
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Generator

# Configure the application before it is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("IMAGE_DIR", tempfile.mkdtemp(prefix="dayiart-images-"))
os.environ["JWT_SECRET_KEY"] = "test-secret"

import smtplib

import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.main import app
from apps.shared.auth import create_access_token, hash_password
from apps.shared.clock import FixedClock, get_clock
from apps.shared.database import Base, SessionLocal, engine, get_db
from apps.days import repository as days_repository
from apps.days.images import ImageStore, get_image_generator, get_image_store
from apps.days.models import Day
from apps.days.service import get_random
from apps.users.mailer import get_mailer
from apps.users.models import User, ROLE_ADMIN, ROLE_USER

NOW = datetime(2024, 3, 20, 10, 30)
TODAY = date(2024, 3, 20)
TOMORROW = date(2024, 3, 21)
PASSWORD = "Password1"


class FakeImageGenerator:
    """Records prompts instead of calling the image API."""

    def __init__(self):
        self.prompts = []
        self.fail = False

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail:
            raise requests.ConnectionError("image API unreachable")
        return "https://images.example.com/generated.png"

    def download(self, url: str) -> bytes:
        return b"\x89PNG fake image"


class FakeMailer:
    """Collects sent messages in an outbox."""

    def __init__(self):
        self.outbox = []
        self.fail = False

    def send(self, to: str, subject: str, html: str) -> None:
        if self.fail:
            raise smtplib.SMTPException("relay refused the message")
        self.outbox.append({"to": to, "subject": subject, "html": html})


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Fresh schema and session for each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def generator() -> FakeImageGenerator:
    return FakeImageGenerator()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def image_store(tmp_path: Path) -> ImageStore:
    return ImageStore(directory=str(tmp_path / "images"))


@pytest.fixture
def client(db, clock, generator, mailer, image_store) -> Generator[TestClient, None, None]:
    """TestClient wired to the test session and fake collaborators."""
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_random] = lambda: random.Random(42)
    app.dependency_overrides[get_image_generator] = lambda: generator
    app.dependency_overrides[get_image_store] = lambda: image_store
    app.dependency_overrides[get_mailer] = lambda: mailer
    try:
        with TestClient(app, raise_server_exceptions=False) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def make_user(db: Session, email: str = "user@example.com", admin: bool = False, **fields) -> User:
    roles = [ROLE_USER, ROLE_ADMIN] if admin else [ROLE_USER]
    user = User(
        email=email,
        password=hash_password(PASSWORD),
        register_date=NOW,
        roles=roles,
        **fields,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


def make_day(db: Session, day_date: date, votes=(0, 0, 0), **fields) -> Day:
    """Create a day with one theme per vote count, titled "Theme <i>"."""
    day = days_repository.add_day_with_themes(
        db, day_date, [f"Theme {i}" for i in range(len(votes))]
    )
    db.flush()
    for theme, nb_vote in zip(days_repository.get_themes_for_day(db, day.id), votes):
        theme.nb_vote = nb_vote
    for key, value in fields.items():
        setattr(day, key, value)
    db.commit()
    db.refresh(day)
    return day


@pytest.fixture
def user(db) -> User:
    return make_user(db)


@pytest.fixture
def admin(db) -> User:
    return make_user(db, email="admin@example.com", admin=True)
