# services/content_management/schemas/projects.py
from pydantic import Field
from typing import Optional
from datetime import datetime

from shared.schemas import CamelModel
from services.user_management.schemas.users import AuthorOut


class ProjectCreate(CamelModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    image: Optional[str] = None
    category: Optional[str] = None


class ProjectOut(CamelModel):
    id: str
    title: str
    description: str
    image: Optional[str] = None
    category: str
    author_id: str
    created_at: Optional[datetime] = None
    author: AuthorOut
