# services/user_management/controllers/auth_service.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy.future import select

from services.user_management.models.users import User, UserRole
from services.user_management.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    AuthResponse,
    AuthUser,
    ProfileOut,
)
from services.user_management.controllers.user_service import get_user_stats
from shared.db import get_db
from shared.auth import verify_password, get_password_hash, create_access_token, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# --- REGISTER ---
@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: AsyncSession = Depends(get_db)):
    if payload.role == UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin accounts cannot be self-registered"
        )

    result = await db.execute(select(User).where(User.email == payload.email))
    if result.scalars().first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    user = User(
        email=payload.email,
        password=get_password_hash(payload.password),
        name=payload.name,
        role=payload.role,
        school=payload.school,
        school_type=payload.school_type,
        school_id=payload.school_id,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    await db.refresh(user)
    logger.info("Registered user %s with role %s", user.id, user.role.value)

    return AuthResponse(
        message="User registered successfully",
        token=create_access_token(user.id, user.role.value),
        user=AuthUser.model_validate(user),
    )


# --- LOGIN ---
@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.email == payload.email))
    user = result.scalars().first()

    # same answer for unknown email and wrong password
    if not user or not verify_password(payload.password, user.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return AuthResponse(
        message="Login successful",
        token=create_access_token(user.id, user.role.value),
        user=AuthUser.model_validate(user),
    )


# --- OWN PROFILE ---
@router.get("/profile", response_model=ProfileOut)
async def get_profile(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    user = await db.get(User, current_user["user_id"])
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    stats = await get_user_stats(db, user.id)
    return ProfileOut(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        avatar=user.avatar,
        bio=user.bio,
        school=user.school,
        verified=user.verified,
        stats=stats,
    )
