# services/user_management/models/users.py
from sqlalchemy import Column, String, Enum, ForeignKey, DateTime, Boolean, Text, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from shared.db import Base
import enum
import uuid


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    PROFESSOR = "PROFESSOR"
    ALUNO = "ALUNO"
    ESCOLA = "ESCOLA"
    COMUNIDADE = "COMUNIDADE"


class SchoolType(str, enum.Enum):
    ESCOLA = "ESCOLA"
    CRECHE = "CRECHE"
    CMEI = "CMEI"


class Zone(str, enum.Enum):
    URBANA = "URBANA"
    RURAL = "RURAL"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False)
    password = Column(String, nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.ALUNO)
    verified = Column(Boolean, default=False, nullable=False)
    avatar = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    school = Column(String(255), nullable=True)  # legacy free-text school name
    school_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    school_type = Column(Enum(SchoolType), nullable=True)
    zone = Column(Enum(Zone), nullable=True)
    inep = Column(String(20), nullable=True)
    address = Column(String, nullable=True)
    phone = Column(String(30), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Schools are users with role ESCOLA; members keep a reference to them
    school_account = relationship("User", remote_side=[id], back_populates="members")
    members = relationship("User", back_populates="school_account")

    posts = relationship("Post", back_populates="author", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="author", cascade="all, delete-orphan")
    reactions = relationship("Reaction", back_populates="user", cascade="all, delete-orphan")
    projects = relationship("Project", back_populates="author", cascade="all, delete-orphan")
    moderated_items = relationship("ModerationItem", back_populates="moderator")

    following = relationship(
        "UserFollow", foreign_keys="UserFollow.follower_id",
        back_populates="follower", cascade="all, delete-orphan"
    )
    followers = relationship(
        "UserFollow", foreign_keys="UserFollow.following_id",
        back_populates="following", cascade="all, delete-orphan"
    )

    badges_given = relationship(
        "Badge", foreign_keys="Badge.giver_id", back_populates="giver", cascade="all, delete-orphan"
    )
    badges_received = relationship(
        "Badge", foreign_keys="Badge.receiver_id", back_populates="receiver", cascade="all, delete-orphan"
    )
    testimonials_sent = relationship(
        "Testimonial", foreign_keys="Testimonial.sender_id", back_populates="sender", cascade="all, delete-orphan"
    )
    testimonials_received = relationship(
        "Testimonial", foreign_keys="Testimonial.receiver_id", back_populates="receiver", cascade="all, delete-orphan"
    )
    views_made = relationship(
        "ProfileView", foreign_keys="ProfileView.viewer_id", back_populates="viewer", cascade="all, delete-orphan"
    )
    views_received = relationship(
        "ProfileView", foreign_keys="ProfileView.profile_id", back_populates="profile", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_user_role", "role"),
        Index("idx_user_school", "school_id"),
        Index("idx_user_created", "created_at"),
    )
