# services/content_management/models/projects.py
from sqlalchemy import Column, String, ForeignKey, DateTime, Text, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from shared.db import Base
import uuid


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    image = Column(String, nullable=True)
    category = Column(String(100), nullable=False, default="Geral")
    author_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    author = relationship("User", back_populates="projects")

    __table_args__ = (
        Index("idx_project_author", "author_id"),
        Index("idx_project_category", "category"),
    )
