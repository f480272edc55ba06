# services/social_network/controllers/social_service.py
import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from sqlalchemy.future import select
from sqlalchemy import func

from services.user_management.models.users import User
from services.content_management.models.posts import Post
from services.social_network.models.badges import Badge, BadgeType
from services.social_network.models.testimonials import Testimonial, TestimonialStatus
from services.social_network.models.profile_views import ProfileView
from services.social_network.models.events import WeeklyEvent
from services.social_network.schemas.social import (
    BadgeRequest,
    BadgeOut,
    TestimonialCreate,
    TestimonialOut,
    TestimonialStatusUpdate,
    TrendingTag,
    EventCreate,
    EventOut,
)
from services.user_management.schemas.users import UserSummary
from shared.db import get_db
from shared.auth import get_current_user, get_current_admin
from shared.schemas import MessageOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/social", tags=["Social"])

RESOLVED_TESTIMONIAL_STATES = (TestimonialStatus.APPROVED, TestimonialStatus.REJECTED)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


async def _require_user(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


# --- BADGES ---
@router.post("/badge/{receiver_id}", response_model=BadgeOut, status_code=status.HTTP_201_CREATED)
async def give_badge(
    receiver_id: str,
    payload: BadgeRequest,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    giver_id = current_user["user_id"]
    if giver_id == receiver_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot give a badge to yourself")

    await _require_user(db, receiver_id)

    lookup = select(Badge).where(
        Badge.giver_id == giver_id,
        Badge.receiver_id == receiver_id,
        Badge.type == payload.type,
    )
    existing = (await db.execute(lookup)).scalars().first()
    if existing:
        return existing

    badge = Badge(giver_id=giver_id, receiver_id=receiver_id, type=payload.type)
    db.add(badge)
    try:
        await db.commit()
    except IntegrityError:
        # lost the race against an identical badge; hand back the stored one
        await db.rollback()
        return (await db.execute(lookup)).scalars().first()

    await db.refresh(badge)
    logger.info("User %s gave badge %s to %s", giver_id, payload.type.value, receiver_id)
    return badge


@router.get("/badges/{user_id}", response_model=Dict[str, int])
async def badge_counts(user_id: str, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Badge.type, func.count(Badge.id))
        .where(Badge.receiver_id == user_id)
        .group_by(Badge.type)
    )
    counts = {badge_type.value: 0 for badge_type in BadgeType}
    for badge_type, count in result.all():
        counts[badge_type.value] = count
    return counts


# --- PROFILE VIEWS ---
@router.post("/profile-view/{profile_id}", status_code=status.HTTP_201_CREATED)
async def record_profile_view(
    profile_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    viewer_id = current_user["user_id"]
    if viewer_id == profile_id:
        # own visits are not counted
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    await _require_user(db, profile_id)

    db.add(ProfileView(viewer_id=viewer_id, profile_id=profile_id))
    await db.commit()
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/profile-visitors", response_model=List[UserSummary])
async def profile_visitors(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    last_visit = func.max(ProfileView.created_at).label("last_visit")
    result = await db.execute(
        select(User, last_visit)
        .join(ProfileView, ProfileView.viewer_id == User.id)
        .where(ProfileView.profile_id == current_user["user_id"])
        .group_by(User.id)
        .order_by(last_visit.desc())
        .limit(10)
    )
    return [viewer for viewer, _ in result.all()]


# --- TESTIMONIALS ---
@router.post("/testimonial", response_model=TestimonialOut, status_code=status.HTTP_201_CREATED)
async def send_testimonial(
    payload: TestimonialCreate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    sender_id = current_user["user_id"]
    content = payload.content.strip()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Content and receiverId are required")
    if sender_id == payload.receiver_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot write a testimonial for yourself")

    await _require_user(db, payload.receiver_id)

    testimonial = Testimonial(
        sender_id=sender_id,
        receiver_id=payload.receiver_id,
        content=content,
        status=TestimonialStatus.PENDING,
    )
    db.add(testimonial)
    await db.commit()
    logger.info("User %s sent testimonial %s to %s", sender_id, testimonial.id, payload.receiver_id)

    result = await db.execute(
        select(Testimonial)
        .options(selectinload(Testimonial.sender))
        .where(Testimonial.id == testimonial.id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


# registered before /testimonials/{user_id} so "pending" is not taken for an id
@router.get("/testimonials/pending", response_model=List[TestimonialOut])
async def pending_testimonials(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    result = await db.execute(
        select(Testimonial)
        .options(selectinload(Testimonial.sender))
        .where(
            Testimonial.receiver_id == current_user["user_id"],
            Testimonial.status == TestimonialStatus.PENDING,
        )
        .order_by(Testimonial.created_at.desc())
    )
    return result.scalars().all()


@router.get("/testimonials/{user_id}", response_model=List[TestimonialOut])
async def approved_testimonials(user_id: str, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Testimonial)
        .options(selectinload(Testimonial.sender))
        .where(
            Testimonial.receiver_id == user_id,
            Testimonial.status == TestimonialStatus.APPROVED,
        )
        .order_by(Testimonial.created_at.desc())
    )
    return result.scalars().all()


@router.put("/testimonial/{testimonial_id}/status", response_model=TestimonialOut)
async def update_testimonial_status(
    testimonial_id: str,
    payload: TestimonialStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    if payload.status not in {state.value for state in RESOLVED_TESTIMONIAL_STATES}:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")

    result = await db.execute(
        select(Testimonial)
        .options(selectinload(Testimonial.sender))
        .where(Testimonial.id == testimonial_id)
    )
    testimonial = result.scalars().first()
    if not testimonial:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Testimonial not found")
    if testimonial.receiver_id != current_user["user_id"]:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
    if testimonial.status in RESOLVED_TESTIMONIAL_STATES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Testimonial already {testimonial.status.value.lower()}"
        )

    testimonial.status = TestimonialStatus(payload.status)
    await db.commit()
    logger.info("User %s marked testimonial %s as %s", current_user["user_id"], testimonial_id, payload.status)
    return testimonial


# --- TRENDING TAGS ---
@router.get("/trending-tags", response_model=List[TrendingTag])
async def trending_tags(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Post.tags).order_by(Post.created_at.desc()).limit(100))
    counts = Counter(tag for tags in result.scalars().all() for tag in (tags or []))
    return [TrendingTag(name=name, count=count) for name, count in counts.most_common(10)]


# --- WEEKLY EVENTS ---
@router.get("/events", response_model=List[EventOut])
async def upcoming_events(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(WeeklyEvent)
        .where(WeeklyEvent.date >= datetime.now(timezone.utc))
        .order_by(WeeklyEvent.date)
        .limit(5)
    )
    return result.scalars().all()


@router.post("/events", response_model=EventOut, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreate,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(get_current_admin)
):
    event = WeeklyEvent(name=payload.name.strip(), date=_as_utc(payload.date), link=payload.link)
    db.add(event)
    await db.commit()
    await db.refresh(event)
    logger.info("Admin %s created event %s", admin["user_id"], event.id)
    return event


@router.delete("/events/{event_id}", response_model=MessageOut)
async def delete_event(
    event_id: str,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(get_current_admin)
):
    event = await db.get(WeeklyEvent, event_id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")

    await db.delete(event)
    await db.commit()
    logger.info("Admin %s deleted event %s", admin["user_id"], event_id)
    return MessageOut(message="Event deleted")
