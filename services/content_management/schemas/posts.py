# services/content_management/schemas/posts.py
from pydantic import Field, field_validator
from typing import Optional, List, Dict
from datetime import datetime

from shared.schemas import CamelModel
from services.content_management.models.posts import ReactionType
from services.user_management.schemas.users import UserSummary, AuthorOut


class PostCreate(CamelModel):
    content: str = ""
    images: List[str] = Field(default_factory=list)
    image: Optional[str] = None  # legacy single image
    tags: List[str] = Field(default_factory=list)


class PostUpdate(CamelModel):
    content: Optional[str] = None
    images: Optional[List[str]] = None
    image: Optional[str] = None
    tags: Optional[List[str]] = None


class CommentCreate(CamelModel):
    content: str = Field(..., min_length=1)


class CommentOut(CamelModel):
    id: str
    content: str
    post_id: str
    author_id: str
    created_at: Optional[datetime] = None
    author: UserSummary


class ReactionRequest(CamelModel):
    type: ReactionType = ReactionType.LIKE

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value):
        if value is None or value == "":
            return ReactionType.LIKE
        return value.upper() if isinstance(value, str) else value


class ReactionOut(CamelModel):
    liked: bool
    type: Optional[ReactionType] = None


class PostBase(CamelModel):
    id: str
    content: str
    image: Optional[str] = None
    images: List[str] = []
    tags: List[str] = []
    author_id: str
    created_at: Optional[datetime] = None
    author: AuthorOut


class PostOut(PostBase):
    likes: int = 0
    comments: int = 0
    liked: bool = False
    user_reaction: Optional[ReactionType] = None
    reactions: Dict[str, int] = {}


class PostDetailOut(PostBase):
    likes: int = 0
    reactions: Dict[str, int] = {}
    comments: List[CommentOut] = []
