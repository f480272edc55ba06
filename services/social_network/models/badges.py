# services/social_network/models/badges.py
from sqlalchemy import Column, String, Enum, ForeignKey, DateTime, UniqueConstraint, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from shared.db import Base
import enum
import uuid


class BadgeType(str, enum.Enum):
    PROATIVO = "PROATIVO"
    ESPECIAL = "ESPECIAL"
    HARMONIOSO = "HARMONIOSO"


class Badge(Base):
    __tablename__ = "badges"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    giver_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    receiver_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    type = Column(Enum(BadgeType), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("giver_id", "receiver_id", "type", name="uq_badge_giver_receiver_type"),
        CheckConstraint("giver_id <> receiver_id", name="ck_badge_not_self"),
    )

    giver = relationship("User", foreign_keys=[giver_id], back_populates="badges_given")
    receiver = relationship("User", foreign_keys=[receiver_id], back_populates="badges_received")
