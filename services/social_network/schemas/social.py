# services/social_network/schemas/social.py
from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime

from shared.schemas import CamelModel
from services.social_network.models.badges import BadgeType
from services.social_network.models.testimonials import TestimonialStatus


class BadgeRequest(CamelModel):
    type: BadgeType

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value):
        return value.strip().upper() if isinstance(value, str) else value


class BadgeOut(CamelModel):
    id: str
    giver_id: str
    receiver_id: str
    type: BadgeType
    created_at: Optional[datetime] = None


class SenderOut(CamelModel):
    id: str
    name: str
    avatar: Optional[str] = None


class TestimonialCreate(CamelModel):
    content: str = Field(..., min_length=1)
    receiver_id: str = Field(..., min_length=1)


class TestimonialOut(CamelModel):
    id: str
    sender_id: str
    receiver_id: str
    content: str
    status: TestimonialStatus
    created_at: Optional[datetime] = None
    sender: Optional[SenderOut] = None


class TestimonialStatusUpdate(CamelModel):
    status: str

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value):
        return value.strip().upper() if isinstance(value, str) else value


class TrendingTag(CamelModel):
    name: str
    count: int


class EventCreate(CamelModel):
    name: str = Field(..., min_length=1)
    date: datetime
    link: Optional[str] = None


class EventOut(CamelModel):
    id: str
    name: str
    date: datetime
    link: Optional[str] = None
