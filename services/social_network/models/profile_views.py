# services/social_network/models/profile_views.py
from sqlalchemy import Column, String, ForeignKey, DateTime, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from shared.db import Base
import uuid


class ProfileView(Base):
    __tablename__ = "profile_views"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    viewer_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    profile_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    viewer = relationship("User", foreign_keys=[viewer_id], back_populates="views_made")
    profile = relationship("User", foreign_keys=[profile_id], back_populates="views_received")

    __table_args__ = (
        Index("idx_profile_view_profile", "profile_id", "created_at"),
    )
