# services/user_management/schemas/auth.py
from pydantic import EmailStr, Field, field_validator
from typing import Optional

from shared.schemas import CamelModel
from services.user_management.models.users import UserRole, SchoolType
from services.user_management.schemas.users import UserStats


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    role: UserRole
    school: Optional[str] = None
    school_type: Optional[SchoolType] = None
    school_id: Optional[str] = None

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, value):
        return value.upper() if isinstance(value, str) else value


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthUser(CamelModel):
    id: str
    email: str
    name: str
    role: UserRole


class AuthResponse(CamelModel):
    message: str
    token: str
    user: AuthUser


class ProfileOut(CamelModel):
    id: str
    email: str
    name: str
    role: UserRole
    avatar: Optional[str] = None
    bio: Optional[str] = None
    school: Optional[str] = None
    verified: bool
    stats: UserStats
