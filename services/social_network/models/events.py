# services/social_network/models/events.py
from sqlalchemy import Column, String, DateTime
from shared.db import Base
import uuid


class WeeklyEvent(Base):
    __tablename__ = "weekly_events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    link = Column(String, nullable=True)
