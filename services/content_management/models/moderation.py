# services/content_management/models/moderation.py
from sqlalchemy import Column, String, Enum, ForeignKey, DateTime, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from shared.db import Base
import enum
import uuid


class ModerationStatus(str, enum.Enum):
    PENDENTE = "PENDENTE"
    APROVADO = "APROVADO"
    REPROVADO = "REPROVADO"


class ModerationItem(Base):
    __tablename__ = "moderation_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    post_id = Column(String(36), ForeignKey("posts.id"), unique=True, nullable=False)
    reason = Column(Text, nullable=True)
    status = Column(Enum(ModerationStatus), nullable=False, default=ModerationStatus.PENDENTE)
    moderator_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    post = relationship("Post", back_populates="moderation")
    moderator = relationship("User", back_populates="moderated_items")
