"""
Day and Theme queries

Explicit lookups and SQL-side updates for days, themes and votes.
Counters are incremented with "column + 1" in a single UPDATE so that
concurrent requests never lose an increment. Nothing here commits;
callers own the transaction.
"""

from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from apps.days.models import Day, Theme, user_theme

DAY_COUNTERS = {
    "views": Day.nb_view,
    "finishes": Day.nb_finish,
    "instagram_posts": Day.nb_post_instagram,
}


def get_day_by_date(db: Session, day_date: date) -> Optional[Day]:
    return db.query(Day).filter(Day.day_date == day_date).first()


def get_latest_day(db: Session) -> Optional[Day]:
    return db.query(Day).order_by(Day.day_date.desc()).first()


def get_theme(db: Session, theme_id: int) -> Optional[Theme]:
    return db.query(Theme).filter(Theme.id == theme_id).first()


def get_themes_for_day(db: Session, day_id: int) -> List[Theme]:
    """Themes of a day, most voted first."""
    return (
        db.query(Theme)
        .filter(Theme.day_id == day_id)
        .order_by(Theme.nb_vote.desc(), Theme.id.asc())
        .all()
    )


def get_theme_day(db: Session, theme: Theme) -> Optional[Day]:
    return db.query(Day).filter(Day.id == theme.day_id).first()


def add_day_with_themes(db: Session, day_date: date, titles: List[str]) -> Day:
    """Stage a new day and its themes (vote count 0) in the session."""
    day = Day(
        day_date=day_date,
        nb_view=0,
        nb_finish=0,
        nb_post_instagram=0,
    )
    db.add(day)
    db.flush()

    for title in titles:
        db.add(Theme(day_id=day.id, title=title, nb_vote=0))

    return day


def increment_day_counter(db: Session, day_id: int, counter: str) -> None:
    column = DAY_COUNTERS[counter]
    db.query(Day).filter(Day.id == day_id).update(
        {column: column + 1},
        synchronize_session=False,
    )


def claim_image_generation(db: Session, day_id: int, now: datetime, stale_before: datetime) -> bool:
    """
    Atomically mark a day as "generating".

    Succeeds only while the day has no image and no live claim, so at most
    one request at a time calls the image generator for a given day.
    Claims older than stale_before are treated as abandoned.
    """
    claimed = (
        db.query(Day)
        .filter(
            Day.id == day_id,
            Day.image_url.is_(None),
            or_(
                Day.generation_started_at.is_(None),
                Day.generation_started_at < stale_before,
            ),
        )
        .update({Day.generation_started_at: now}, synchronize_session=False)
    )
    return claimed == 1


def release_image_generation(db: Session, day_id: int) -> None:
    db.query(Day).filter(Day.id == day_id).update(
        {Day.generation_started_at: None},
        synchronize_session=False,
    )


def set_day_image(db: Session, day_id: int, image_url: str) -> None:
    db.query(Day).filter(Day.id == day_id).update(
        {Day.image_url: image_url, Day.generation_started_at: None},
        synchronize_session=False,
    )


def has_voted_for(db: Session, user_id: int, theme_id: int) -> bool:
    row = db.execute(
        user_theme.select().where(
            and_(user_theme.c.user_id == user_id, user_theme.c.theme_id == theme_id)
        )
    ).first()
    return row is not None


def add_voter(db: Session, user_id: int, theme_id: int) -> None:
    """Register a user as voter of a theme; a no-op when already registered."""
    if has_voted_for(db, user_id, theme_id):
        return
    db.execute(user_theme.insert().values(user_id=user_id, theme_id=theme_id))


def get_voter_ids(db: Session, theme_id: int) -> List[int]:
    rows = db.execute(
        user_theme.select().where(user_theme.c.theme_id == theme_id)
    ).all()
    return [row.user_id for row in rows]


def increment_theme_votes(db: Session, theme_id: int) -> None:
    db.query(Theme).filter(Theme.id == theme_id).update(
        {Theme.nb_vote: Theme.nb_vote + 1},
        synchronize_session=False,
    )


def delete_day(db: Session, day: Day) -> None:
    """Delete a day together with its themes and their vote rows."""
    theme_ids = [theme_id for (theme_id,) in db.query(Theme.id).filter(Theme.day_id == day.id).all()]
    if theme_ids:
        db.execute(user_theme.delete().where(user_theme.c.theme_id.in_(theme_ids)))
        db.query(Theme).filter(Theme.id.in_(theme_ids)).delete(synchronize_session=False)
    db.delete(day)


def delete_votes_for_user(db: Session, user_id: int) -> None:
    db.execute(user_theme.delete().where(user_theme.c.user_id == user_id))
