# services/user_management/schemas/users.py
from pydantic import EmailStr, Field, field_validator
from typing import Any, Optional, List
from datetime import datetime

from shared.schemas import CamelModel
from services.user_management.models.users import UserRole, SchoolType, Zone


def _upper(value):
    if isinstance(value, str):
        return value.strip().upper() or None
    return value


class UserSummary(CamelModel):
    id: str
    name: str
    avatar: Optional[str] = None
    role: UserRole


class AuthorOut(UserSummary):
    verified: bool = False
    school: Optional[str] = None


class UserOut(CamelModel):
    id: str
    email: str
    name: str
    role: UserRole
    verified: bool
    avatar: Optional[str] = None
    bio: Optional[str] = None
    school: Optional[str] = None
    school_id: Optional[str] = None
    school_type: Optional[SchoolType] = None
    zone: Optional[Zone] = None
    inep: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None


class NetworkUserOut(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole
    avatar: Optional[str] = None
    school: Optional[str] = None
    school_type: Optional[SchoolType] = None
    school_id: Optional[str] = None
    verified: bool
    followers: int = 0


class SearchUserOut(CamelModel):
    id: str
    name: str
    avatar: Optional[str] = None
    role: UserRole
    school: Optional[str] = None
    school_type: Optional[SchoolType] = None
    school_id: Optional[str] = None
    verified: bool


class FeaturedSchoolOut(CamelModel):
    id: str
    name: str
    avatar: Optional[str] = None
    school_type: Optional[SchoolType] = None
    verified: bool
    engagement: int


class UserStats(CamelModel):
    followers: int = 0
    following: int = 0
    posts: int = 0
    projects: Optional[int] = None


class PublicProfileOut(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole
    avatar: Optional[str] = None
    bio: Optional[str] = None
    school: Optional[str] = None
    verified: bool
    stats: UserStats
    is_following: bool = False


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    avatar: Optional[str] = None
    bio: Optional[str] = None
    school: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)


class FollowOut(CamelModel):
    following: bool


class AdminUserCreate(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: Optional[UserRole] = None
    school: Optional[str] = None
    school_id: Optional[str] = None

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, value):
        return _upper(value)


class AdminUserUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    school: Optional[str] = None

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, value):
        return _upper(value)


class AdminUserListItem(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole
    school: Optional[str] = None
    created_at: Optional[datetime] = None
    avatar: Optional[str] = None


class AdminUserPage(CamelModel):
    users: List[AdminUserListItem]
    total: int
    page: int
    total_pages: int


class UserImportRequest(CamelModel):
    users: Any = None


class UserImportResult(CamelModel):
    success: int = 0
    failed: int = 0
    errors: List[str] = []
