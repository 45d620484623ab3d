"""
Day lifecycle

Seeding upcoming days with candidate themes, resolving today's winning
theme into a generated image, and the engagement counters.
"""

import os
import logging
import random
from datetime import date, datetime, timedelta
from typing import List, Sequence

from sqlalchemy.orm import Session

from apps.shared.errors import ConflictError, NotFoundError, ValidationError
from apps.days import repository
from apps.days.images import ImageGenerator, ImageStore
from apps.days.models import Day, Theme

logger = logging.getLogger(__name__)

THEMES_PER_DAY = 3

# Seconds after which an unfinished generation claim may be taken over
IMAGE_GENERATION_CLAIM_TTL = int(os.getenv("IMAGE_GENERATION_CLAIM_TTL", "300"))


def get_random() -> random.Random:
    """Random source for tie-breaks; overridden in tests for determinism."""
    return random.SystemRandom()


def get_day_or_error(db: Session, today: date) -> Day:
    day = repository.get_day_by_date(db, today)
    if not day:
        raise NotFoundError(f"No day found for today : {today.strftime('%d/%m/%Y')}")
    return day


def pick_winning_theme(themes: Sequence[Theme], rng: random.Random) -> Theme:
    """
    Pick the most voted theme, choosing uniformly at random among ties.

    Raises ValueError when themes is empty.
    """
    if not themes:
        raise ValueError("No themes to choose from")

    max_votes = max(theme.nb_vote for theme in themes)
    top_themes = [theme for theme in themes if theme.nb_vote == max_votes]
    return rng.choice(top_themes)


def add_days(db: Session, titles: List[str], today: date) -> List[Day]:
    """
    Append one new day per group of three titles.

    Titles beyond the last full group of three are dropped. The first new
    day follows the latest existing day, or today when there are none.
    Everything is committed in one transaction.
    """
    if not titles:
        raise ValidationError("No themes provided")

    valid_count = (len(titles) // THEMES_PER_DAY) * THEMES_PER_DAY
    if valid_count == 0:
        raise ValidationError(f"At least {THEMES_PER_DAY} themes are required to add a day")

    latest = repository.get_latest_day(db)
    current = latest.day_date if latest else today

    days = []
    try:
        for i in range(0, valid_count, THEMES_PER_DAY):
            current = current + timedelta(days=1)
            days.append(
                repository.add_day_with_themes(db, current, titles[i:i + THEMES_PER_DAY])
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    if valid_count < len(titles):
        logger.info(f"Dropped {len(titles) - valid_count} theme(s) beyond the last group of {THEMES_PER_DAY}")
    logger.info(f"Added {len(days)} day(s), last one on {current.isoformat()}")
    return days


def resolve_today(
    db: Session,
    today: date,
    now: datetime,
    rng: random.Random,
    generator: ImageGenerator,
    store: ImageStore,
) -> Day:
    """
    Return today's day with its image, generating the image on first call.

    The image is generated at most once per day: once image_url is set it
    is served as-is. A concurrent request that finds generation already
    claimed gets a ConflictError. A failed generation releases the claim
    and propagates, leaving image_url unset so the next call retries.
    Every successful call counts one view.
    """
    day = get_day_or_error(db, today)

    if day.image_url is None:
        themes = repository.get_themes_for_day(db, day.id)
        if not themes:
            raise NotFoundError(f"No theme for today : {day.day_date.strftime('%d/%m/%Y')}")

        stale_before = now - timedelta(seconds=IMAGE_GENERATION_CLAIM_TTL)
        claimed = repository.claim_image_generation(db, day.id, now, stale_before)
        db.commit()

        if not claimed:
            db.refresh(day)
            if day.image_url is None:
                raise ConflictError("Image for today is being generated, try again shortly")
        else:
            _generate_day_image(db, day, themes, rng, generator, store)

    repository.increment_day_counter(db, day.id, "views")
    db.commit()
    db.refresh(day)
    return day


def _generate_day_image(
    db: Session,
    day: Day,
    themes: List[Theme],
    rng: random.Random,
    generator: ImageGenerator,
    store: ImageStore,
) -> None:
    selected = pick_winning_theme(themes, rng)
    logger.info(f"Generating image for {day.day_date.isoformat()} with theme '{selected.title}' ({selected.nb_vote} votes)")

    try:
        remote_url = generator.generate(selected.title)
        content = generator.download(remote_url)
        image_url = store.save(day.day_date, content)
    except Exception:
        db.rollback()
        repository.release_image_generation(db, day.id)
        db.commit()
        raise

    repository.set_day_image(db, day.id, image_url)
    db.commit()


def record_finish(db: Session, today: date) -> Day:
    day = get_day_or_error(db, today)
    repository.increment_day_counter(db, day.id, "finishes")
    db.commit()
    db.refresh(day)
    return day


def record_instagram_post(db: Session, today: date) -> Day:
    day = get_day_or_error(db, today)
    repository.increment_day_counter(db, day.id, "instagram_posts")
    db.commit()
    db.refresh(day)
    return day
