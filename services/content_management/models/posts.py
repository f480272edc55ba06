# services/content_management/models/posts.py
from sqlalchemy import Column, String, Enum, ForeignKey, DateTime, Text, JSON, Index, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from shared.db import Base
import enum
import uuid


class ReactionType(str, enum.Enum):
    LIKE = "LIKE"
    LOVE = "LOVE"
    CLAP = "CLAP"
    ROCKET = "ROCKET"
    IDEA = "IDEA"


class Post(Base):
    __tablename__ = "posts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    content = Column(Text, nullable=False, default="")
    images = Column(JSON, nullable=False, default=lambda: [])  # ordered list of URLs
    tags = Column(JSON, nullable=False, default=lambda: [])
    author_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    author = relationship("User", back_populates="posts")
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan")
    reactions = relationship("Reaction", back_populates="post", cascade="all, delete-orphan")
    moderation = relationship(
        "ModerationItem", back_populates="post", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_post_author", "author_id"),
        Index("idx_post_created", "created_at"),
    )

    @property
    def image(self):
        # legacy single-image field, derived from the canonical list
        return self.images[0] if self.images else None


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    content = Column(Text, nullable=False)
    post_id = Column(String(36), ForeignKey("posts.id"), nullable=False)
    author_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    post = relationship("Post", back_populates="comments")
    author = relationship("User", back_populates="comments")

    __table_args__ = (
        Index("idx_comment_post", "post_id"),
    )


class Reaction(Base):
    __tablename__ = "likes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    post_id = Column(String(36), ForeignKey("posts.id"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    type = Column(Enum(ReactionType), nullable=False, default=ReactionType.LIKE)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    post = relationship("Post", back_populates="reactions")
    user = relationship("User", back_populates="reactions")

    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_reaction_post_user"),
    )
