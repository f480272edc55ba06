# services/user_management/schemas/schools.py
from pydantic import EmailStr, Field, field_validator
from typing import Optional, List, Any

from shared.schemas import CamelModel
from services.user_management.models.users import UserRole, SchoolType, Zone


class SchoolCreate(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    inep: Optional[str] = None
    zone: Optional[Zone] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    school_type: Optional[SchoolType] = None

    @field_validator("inep", mode="before")
    @classmethod
    def inep_as_text(cls, value):
        return str(value) if value is not None else None


class SchoolOut(CamelModel):
    id: str
    name: str
    email: str
    school: Optional[str] = None
    role: UserRole
    avatar: Optional[str] = None
    inep: Optional[str] = None
    zone: Optional[Zone] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    school_type: Optional[SchoolType] = None
    verified: bool


class SchoolPage(CamelModel):
    schools: List[SchoolOut]
    total: int
    total_pages: int
    current_page: int


class SchoolImportRequest(CamelModel):
    schools: Any = None


class SchoolImportResult(CamelModel):
    message: str
    imported: int
    errors: List[dict]
