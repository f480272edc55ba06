# services/content_management/schemas/moderation.py
from typing import Optional, List
from datetime import datetime

from shared.schemas import CamelModel
from services.content_management.models.moderation import ModerationStatus


class FlagRequest(CamelModel):
    reason: Optional[str] = None


class RejectRequest(CamelModel):
    reason: Optional[str] = None
    delete_post: bool = False


class ModeratedAuthor(CamelModel):
    name: str
    school: Optional[str] = None


class ModeratorOut(CamelModel):
    name: str


class ModeratedPost(CamelModel):
    id: str
    content: str
    image: Optional[str] = None
    images: List[str] = []
    author_id: str
    created_at: Optional[datetime] = None
    author: Optional[ModeratedAuthor] = None


class ModerationOut(CamelModel):
    id: str
    post_id: str
    reason: Optional[str] = None
    status: ModerationStatus
    moderator_id: Optional[str] = None
    created_at: Optional[datetime] = None
    post: Optional[ModeratedPost] = None
    moderator: Optional[ModeratorOut] = None
