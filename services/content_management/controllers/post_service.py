# services/content_management/controllers/post_service.py
import logging
import re
from collections import defaultdict
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from sqlalchemy.future import select
from sqlalchemy import func

from services.content_management.models.posts import Post, Comment, Reaction
from services.content_management.schemas.posts import (
    PostCreate,
    PostUpdate,
    PostOut,
    PostDetailOut,
    CommentCreate,
    CommentOut,
    ReactionRequest,
    ReactionOut,
)
from services.user_management.schemas.users import AuthorOut
from shared.db import get_db
from shared.auth import get_current_user, get_optional_user, is_owner_or_admin
from shared.schemas import MessageOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["Posts"])

HASHTAG_RE = re.compile(r"#(\w+)")
FEED_SIZE = 50


def _clean_images(images: Optional[List[str]], legacy_image: Optional[str]) -> List[str]:
    cleaned = [url for url in (images or []) if url]
    if not cleaned and legacy_image:
        cleaned = [legacy_image]
    return cleaned


def _collect_tags(content: str, tags: Optional[List[str]]) -> List[str]:
    collected = []
    for tag in list(tags or []) + HASHTAG_RE.findall(content or ""):
        tag = tag.lstrip("#").strip()
        if tag and tag not in collected:
            collected.append(tag)
    return collected


async def _get_post(db: AsyncSession, post_id: str, with_comments: bool = False) -> Optional[Post]:
    options = [selectinload(Post.author)]
    if with_comments:
        options.append(selectinload(Post.comments).selectinload(Comment.author))
    result = await db.execute(
        select(Post)
        .options(*options)
        .where(Post.id == post_id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def _reaction_counts(db: AsyncSession, post_ids: List[str]):
    counts = defaultdict(dict)
    result = await db.execute(
        select(Reaction.post_id, Reaction.type, func.count(Reaction.id))
        .where(Reaction.post_id.in_(post_ids))
        .group_by(Reaction.post_id, Reaction.type)
    )
    for post_id, reaction_type, count in result.all():
        counts[post_id][reaction_type.value] = count
    return counts


async def serialize_posts(db: AsyncSession, posts: List[Post], viewer_id: Optional[str] = None) -> List[PostOut]:
    """Attach reaction/comment counts and the viewer's own reaction to each post."""
    if not posts:
        return []
    post_ids = [post.id for post in posts]

    reactions = await _reaction_counts(db, post_ids)

    comment_result = await db.execute(
        select(Comment.post_id, func.count(Comment.id))
        .where(Comment.post_id.in_(post_ids))
        .group_by(Comment.post_id)
    )
    comments = dict(comment_result.all())

    mine = {}
    if viewer_id:
        mine_result = await db.execute(
            select(Reaction.post_id, Reaction.type)
            .where(Reaction.user_id == viewer_id, Reaction.post_id.in_(post_ids))
        )
        mine = dict(mine_result.all())

    return [
        PostOut(
            id=post.id,
            content=post.content,
            image=post.image,
            images=post.images or [],
            tags=post.tags or [],
            author_id=post.author_id,
            created_at=post.created_at,
            author=AuthorOut.model_validate(post.author),
            likes=sum(reactions[post.id].values()),
            comments=comments.get(post.id, 0),
            liked=post.id in mine,
            user_reaction=mine.get(post.id),
            reactions=reactions[post.id],
        )
        for post in posts
    ]


# --- FEED ---
@router.get("", response_model=List[PostOut])
async def get_feed(
    db: AsyncSession = Depends(get_db),
    current_user: Optional[dict] = Depends(get_optional_user)
):
    result = await db.execute(
        select(Post)
        .options(selectinload(Post.author))
        .order_by(Post.created_at.desc())
        .limit(FEED_SIZE)
    )
    viewer_id = current_user["user_id"] if current_user else None
    return await serialize_posts(db, result.scalars().all(), viewer_id)


# --- CREATE POST ---
@router.post("", response_model=PostOut, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    content = payload.content.strip()
    images = _clean_images(payload.images, payload.image)
    if not content and not images:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Content or at least one image is required"
        )

    post = Post(
        content=content,
        images=images,
        tags=_collect_tags(content, payload.tags),
        author_id=current_user["user_id"],
    )
    db.add(post)
    await db.commit()
    logger.info("User %s created post %s", current_user["user_id"], post.id)

    post = await _get_post(db, post.id)
    return (await serialize_posts(db, [post], current_user["user_id"]))[0]


# --- GET POST ---
@router.get("/{post_id}", response_model=PostDetailOut)
async def get_post(post_id: str, db: AsyncSession = Depends(get_db)):
    post = await _get_post(db, post_id, with_comments=True)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    reactions = (await _reaction_counts(db, [post.id]))[post.id]
    comments = sorted(post.comments, key=lambda comment: comment.created_at)

    return PostDetailOut(
        id=post.id,
        content=post.content,
        image=post.image,
        images=post.images or [],
        tags=post.tags or [],
        author_id=post.author_id,
        created_at=post.created_at,
        author=AuthorOut.model_validate(post.author),
        likes=sum(reactions.values()),
        reactions=reactions,
        comments=[CommentOut.model_validate(comment) for comment in comments],
    )


# --- UPDATE POST ---
@router.put("/{post_id}", response_model=PostOut)
async def update_post(
    post_id: str,
    payload: PostUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    post = await db.get(Post, post_id)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    if not is_owner_or_admin(current_user, post.author_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")

    content = post.content if payload.content is None else payload.content.strip()
    images = post.images or []
    if payload.images is not None or payload.image is not None:
        images = _clean_images(payload.images, payload.image)

    if not content and not images:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Content or at least one image is required"
        )

    post.content = content
    post.images = images
    if payload.tags is not None or payload.content is not None:
        post.tags = _collect_tags(content, payload.tags if payload.tags is not None else [])

    await db.commit()

    post = await _get_post(db, post_id)
    return (await serialize_posts(db, [post], current_user["user_id"]))[0]


# --- DELETE POST ---
@router.delete("/{post_id}", response_model=MessageOut)
async def delete_post(
    post_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    post = await db.get(Post, post_id)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    if not is_owner_or_admin(current_user, post.author_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")

    await db.delete(post)
    await db.commit()
    logger.info("User %s deleted post %s", current_user["user_id"], post_id)
    return MessageOut(message="Post deleted")


# --- REACT (LIKE / CHANGE / UNDO) ---
@router.post("/{post_id}/like", response_model=ReactionOut)
async def react_to_post(
    post_id: str,
    payload: Optional[ReactionRequest] = None,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    reaction_type = (payload or ReactionRequest()).type
    user_id = current_user["user_id"]

    if not await db.get(Post, post_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    result = await db.execute(
        select(Reaction).where(Reaction.post_id == post_id, Reaction.user_id == user_id)
    )
    existing = result.scalars().first()

    if existing and existing.type == reaction_type:
        await db.delete(existing)
        await db.commit()
        return ReactionOut(liked=False, type=None)

    if existing:
        existing.type = reaction_type
        await db.commit()
        return ReactionOut(liked=True, type=reaction_type)

    db.add(Reaction(post_id=post_id, user_id=user_id, type=reaction_type))
    try:
        await db.commit()
    except IntegrityError:
        # a concurrent request already inserted the (post, user) row
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Reaction already registered")

    return ReactionOut(liked=True, type=reaction_type)


# --- ADD COMMENT ---
@router.post("/{post_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: str,
    payload: CommentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    if not await db.get(Post, post_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    content = payload.content.strip()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Comment content is required")

    comment = Comment(content=content, post_id=post_id, author_id=current_user["user_id"])
    db.add(comment)
    await db.commit()

    result = await db.execute(
        select(Comment)
        .options(selectinload(Comment.author))
        .where(Comment.id == comment.id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()
