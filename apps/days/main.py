"""
Day endpoints

Today's generated image, engagement counters, and admin seeding of
upcoming days with candidate themes.
"""
import random
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from apps.shared.auth import require_admin
from apps.shared.clock import Clock, get_clock
from apps.shared.database import get_db
from apps.days import service
from apps.days.images import ImageGenerator, ImageStore, get_image_generator, get_image_store
from apps.days.schemas import AddDaysRequest, MessageResponse, TodayResponse
from apps.users.models import User

logger = logging.getLogger(__name__)

router = APIRouter(tags=["days"])


@router.get("/today", response_model=TodayResponse)
def today(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    rng: random.Random = Depends(service.get_random),
    generator: ImageGenerator = Depends(get_image_generator),
    store: ImageStore = Depends(get_image_store),
):
    """
    Get today's image.
    Generates it from the most voted theme on the first call of the day.
    """
    day = service.resolve_today(db, clock.today(), clock.now(), rng, generator, store)
    return day.to_dict()


@router.api_route("/finished", methods=["GET", "POST"])
def finished(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    """Count one completed drawing for today."""
    day = service.record_finish(db, clock.today())
    return {"nbFinish": day.nb_finish}


@router.api_route("/instagram", methods=["GET", "POST"])
def instagram(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    """Count one Instagram post for today."""
    day = service.record_instagram_post(db, clock.today())
    return {"nbPostInstagram": day.nb_post_instagram}


@router.post("/api/add_days", response_model=MessageResponse)
def add_days(
    payload: AddDaysRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    admin: User = Depends(require_admin),
):
    """
    Seed upcoming days (admin only).

    Request body:
    {"themes": [{"theme": "..."}, {"theme": "..."}, {"theme": "..."}]}
    """
    titles = [proposal.theme for proposal in payload.themes]
    days = service.add_days(db, titles, clock.today())
    logger.info(f"{admin.email} added {len(days)} day(s)")
    return {"message": "Days added successfully"}
