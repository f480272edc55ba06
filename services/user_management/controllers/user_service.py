# services/user_management/controllers/user_service.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy.future import select
from sqlalchemy import func, or_

from services.user_management.models.users import User, UserRole, SchoolType
from services.user_management.models.follows import UserFollow
from services.content_management.models.posts import Post
from services.content_management.models.projects import Project
from services.user_management.schemas.users import (
    UserOut,
    UserStats,
    UserSummary,
    NetworkUserOut,
    SearchUserOut,
    FeaturedSchoolOut,
    PublicProfileOut,
    ProfileUpdate,
    FollowOut,
)
from shared.db import get_db, count_rows, contains_pattern, LIKE_ESCAPE
from shared.auth import get_current_user, get_optional_user, get_password_hash

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


def _followers_count():
    return (
        select(func.count(UserFollow.id))
        .where(UserFollow.following_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )


async def get_user_stats(db: AsyncSession, user_id: str, include_projects: bool = False) -> UserStats:
    stats = UserStats(
        followers=await count_rows(db, UserFollow, UserFollow.following_id == user_id),
        following=await count_rows(db, UserFollow, UserFollow.follower_id == user_id),
        posts=await count_rows(db, Post, Post.author_id == user_id),
    )
    if include_projects:
        stats.projects = await count_rows(db, Project, Project.author_id == user_id)
    return stats


# --- NETWORK LIST ---
@router.get("", response_model=List[NetworkUserOut])
async def list_users(
    role: Optional[str] = None,
    schoolType: Optional[SchoolType] = None,
    schoolId: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[dict] = Depends(get_optional_user)
):
    stmt = select(User, _followers_count().label("followers"))

    if role and role.upper() != "TODAS":
        try:
            stmt = stmt.where(User.role == UserRole(role.upper()))
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role")
    if schoolType:
        stmt = stmt.where(User.school_type == schoolType)
    if schoolId:
        stmt = stmt.where(User.school_id == schoolId)
    if current_user:
        stmt = stmt.where(User.id != current_user["user_id"])

    result = await db.execute(stmt.order_by(User.created_at.desc()).limit(50))

    return [
        NetworkUserOut(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            avatar=user.avatar,
            school=user.school,
            school_type=user.school_type,
            school_id=user.school_id,
            verified=user.verified,
            followers=followers,
        )
        for user, followers in result.all()
    ]


# --- FEATURED SCHOOLS (RANKING) ---
@router.get("/featured-schools", response_model=List[FeaturedSchoolOut])
async def featured_schools(db: AsyncSession = Depends(get_db)):
    posts_count = (
        select(func.count(Post.id)).where(Post.author_id == User.id).correlate(User).scalar_subquery()
    )
    projects_count = (
        select(func.count(Project.id)).where(Project.author_id == User.id).correlate(User).scalar_subquery()
    )
    engagement = posts_count + projects_count * 3 + _followers_count()

    result = await db.execute(
        select(User, engagement.label("engagement"))
        .where(User.role == UserRole.ESCOLA)
        .order_by(engagement.desc(), User.name)
        .limit(5)
    )

    return [
        FeaturedSchoolOut(
            id=school.id,
            name=school.name,
            avatar=school.avatar,
            school_type=school.school_type,
            verified=school.verified,
            engagement=score or 0,
        )
        for school, score in result.all()
    ]


# --- SEARCH ---
@router.get("/search/{query}", response_model=List[SearchUserOut])
async def search_users(query: str, db: AsyncSession = Depends(get_db)):
    pattern = contains_pattern(query)
    result = await db.execute(
        select(User)
        .where(or_(
            User.name.ilike(pattern, escape=LIKE_ESCAPE),
            User.email.ilike(pattern, escape=LIKE_ESCAPE),
            User.school.ilike(pattern, escape=LIKE_ESCAPE),
        ))
        .order_by(User.name)
        .limit(20)
    )
    return result.scalars().all()


# --- UPDATE OWN PROFILE ---
@router.put("/me", response_model=UserOut)
async def update_me(
    payload: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    user = await db.get(User, current_user["user_id"])
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    update_data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "password" in update_data:
        update_data["password"] = get_password_hash(update_data["password"])

    for field, value in update_data.items():
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    return user


# --- PUBLIC PROFILE ---
@router.get("/{user_id}", response_model=PublicProfileOut)
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[dict] = Depends(get_optional_user)
):
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    is_following = False
    if current_user:
        is_following = await count_rows(
            db, UserFollow,
            UserFollow.follower_id == current_user["user_id"],
            UserFollow.following_id == user_id,
        ) > 0

    return PublicProfileOut(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        avatar=user.avatar,
        bio=user.bio,
        school=user.school,
        verified=user.verified,
        stats=await get_user_stats(db, user.id, include_projects=True),
        is_following=is_following,
    )


# --- FOLLOW / UNFOLLOW (TOGGLE) ---
@router.post("/{user_id}/follow", response_model=FollowOut)
async def toggle_follow(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    follower_id = current_user["user_id"]
    if follower_id == user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot follow yourself")

    if not await db.get(User, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    result = await db.execute(
        select(UserFollow).where(
            UserFollow.follower_id == follower_id,
            UserFollow.following_id == user_id,
        )
    )
    existing = result.scalars().first()

    if existing:
        await db.delete(existing)
        await db.commit()
        return FollowOut(following=False)

    db.add(UserFollow(follower_id=follower_id, following_id=user_id))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Already following this user")

    return FollowOut(following=True)


# --- FOLLOWERS ---
@router.get("/{user_id}/followers", response_model=List[UserSummary])
async def get_followers(user_id: str, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(User)
        .join(UserFollow, UserFollow.follower_id == User.id)
        .where(UserFollow.following_id == user_id)
        .order_by(UserFollow.created_at.desc())
    )
    return result.scalars().all()


# --- FOLLOWING ---
@router.get("/{user_id}/following", response_model=List[UserSummary])
async def get_following(user_id: str, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(User)
        .join(UserFollow, UserFollow.following_id == User.id)
        .where(UserFollow.follower_id == user_id)
        .order_by(UserFollow.created_at.desc())
    )
    return result.scalars().all()
