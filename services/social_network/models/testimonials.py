# services/social_network/models/testimonials.py
from sqlalchemy import Column, String, Enum, ForeignKey, DateTime, Text, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from shared.db import Base
import enum
import uuid


class TestimonialStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Testimonial(Base):
    __tablename__ = "testimonials"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    sender_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    receiver_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    status = Column(Enum(TestimonialStatus), nullable=False, default=TestimonialStatus.PENDING)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    sender = relationship("User", foreign_keys=[sender_id], back_populates="testimonials_sent")
    receiver = relationship("User", foreign_keys=[receiver_id], back_populates="testimonials_received")

    __table_args__ = (
        Index("idx_testimonial_receiver_status", "receiver_id", "status"),
    )
