# services/content_management/controllers/moderation_service.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from sqlalchemy.future import select

from services.content_management.models.posts import Post
from services.content_management.models.moderation import ModerationItem, ModerationStatus
from services.content_management.schemas.moderation import FlagRequest, RejectRequest, ModerationOut
from shared.db import get_db
from shared.auth import get_current_user, get_current_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/moderation", tags=["Moderation"])


def _items_query():
    return select(ModerationItem).options(
        selectinload(ModerationItem.post).selectinload(Post.author),
        selectinload(ModerationItem.moderator),
    )


async def _load_item(db: AsyncSession, item_id: str) -> ModerationItem:
    result = await db.execute(
        _items_query()
        .where(ModerationItem.id == item_id)
        .execution_options(populate_existing=True)
    )
    item = result.scalars().first()
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Moderation item not found")
    return item


def _ensure_pending(item: ModerationItem):
    if item.status != ModerationStatus.PENDENTE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Moderation item already resolved as {item.status.value}"
        )


# --- QUEUE ---
@router.get("", response_model=List[ModerationOut])
async def list_moderation_items(
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(get_current_admin)
):
    result = await db.execute(_items_query().order_by(ModerationItem.created_at.desc()))
    return result.scalars().all()


# --- FLAG POST ---
@router.post("/flag/{post_id}", response_model=ModerationOut, status_code=status.HTTP_201_CREATED)
async def flag_post(
    post_id: str,
    payload: Optional[FlagRequest] = None,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    if not await db.get(Post, post_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    result = await db.execute(select(ModerationItem.id).where(ModerationItem.post_id == post_id))
    if result.first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Post already flagged")

    reason = (payload.reason if payload else None) or "User report"
    item = ModerationItem(post_id=post_id, reason=reason)
    db.add(item)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Post already flagged")

    logger.info("User %s flagged post %s", current_user["user_id"], post_id)
    return await _load_item(db, item.id)


# --- APPROVE ---
@router.put("/{item_id}/approve", response_model=ModerationOut)
async def approve_item(
    item_id: str,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(get_current_admin)
):
    item = await _load_item(db, item_id)
    _ensure_pending(item)

    item.status = ModerationStatus.APROVADO
    item.moderator_id = admin["user_id"]
    await db.commit()

    logger.info("Admin %s approved moderation item %s", admin["user_id"], item_id)
    return await _load_item(db, item_id)


# --- REJECT ---
@router.put("/{item_id}/reject", response_model=ModerationOut)
async def reject_item(
    item_id: str,
    payload: Optional[RejectRequest] = None,
    db: AsyncSession = Depends(get_db),
    admin: dict = Depends(get_current_admin)
):
    payload = payload or RejectRequest()
    item = await _load_item(db, item_id)
    _ensure_pending(item)

    item.status = ModerationStatus.REPROVADO
    item.moderator_id = admin["user_id"]
    if payload.reason is not None:
        item.reason = payload.reason

    if not payload.delete_post:
        await db.commit()
        logger.info("Admin %s rejected moderation item %s", admin["user_id"], item_id)
        return await _load_item(db, item_id)

    # the item goes with the post, so render it before both rows are removed
    await db.flush()
    await db.refresh(item, attribute_names=["moderator"])
    response = ModerationOut.model_validate(item)

    await db.delete(item.post)
    await db.commit()

    logger.info(
        "Admin %s rejected moderation item %s and deleted post %s",
        admin["user_id"], item_id, response.post_id
    )
    return response
