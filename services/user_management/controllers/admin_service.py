# services/user_management/controllers/admin_service.py
import calendar
import io
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import openpyxl
from openpyxl.styles import Font, Alignment
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.future import select
from sqlalchemy import or_

from services.user_management.models.users import User, UserRole, Zone
from services.user_management.models.settings import SystemSetting
from services.content_management.models.posts import Post
from services.content_management.models.moderation import ModerationItem, ModerationStatus
from services.user_management.schemas.users import (
    UserOut,
    AdminUserCreate,
    AdminUserUpdate,
    AdminUserListItem,
    AdminUserPage,
    UserImportRequest,
    UserImportResult,
)
from services.user_management.schemas.schools import (
    SchoolCreate,
    SchoolOut,
    SchoolPage,
    SchoolImportRequest,
    SchoolImportResult,
)
from services.user_management.schemas.settings import (
    AdminStatsOut,
    CountTrend,
    PendingTrend,
    GrowthPoint,
    SettingsMap,
)
from shared.db import get_db, count_rows, contains_pattern, LIKE_ESCAPE
from shared.auth import get_current_admin, get_password_hash
from shared.schemas import MessageOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])

DEFAULT_IMPORT_PASSWORD = "muda1234"
EXPORT_HEADER = ["Name", "Email", "Role", "School", "Created At"]


async def read_settings(db: AsyncSession, keys=None) -> Dict[str, str]:
    stmt = select(SystemSetting)
    if keys is not None:
        stmt = stmt.where(SystemSetting.key.in_(keys))
    result = await db.execute(stmt)
    return {setting.key: setting.value for setting in result.scalars().all()}


def _trend(count: int) -> str:
    return f"+{count}" if count > 0 else "0"


def _csv_field(value) -> str:
    # legacy export strips commas instead of quoting
    return (value or "").replace(",", "")


def _pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


# --- DASHBOARD STATS ---
@router.get("/stats", response_model=AdminStatsOut)
async def get_stats(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_admin)
):
    since = datetime.utcnow() - timedelta(days=30)
    pending = await count_rows(db, ModerationItem, ModerationItem.status == ModerationStatus.PENDENTE)

    recent = await db.execute(select(User).order_by(User.created_at.desc()).limit(5))

    return AdminStatsOut(
        users=CountTrend(
            total=await count_rows(db, User),
            trend=_trend(await count_rows(db, User, User.created_at >= since)),
        ),
        posts=CountTrend(
            total=await count_rows(db, Post),
            trend=_trend(await count_rows(db, Post, Post.created_at >= since)),
        ),
        moderation=PendingTrend(pending=pending, trend=_trend(pending)),
        recent_users=[AdminUserListItem.model_validate(user) for user in recent.scalars().all()],
    )


# --- GROWTH REPORT (LAST 6 MONTHS) ---
@router.get("/reports/growth", response_model=List[GrowthPoint])
async def growth_report(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_admin)
):
    today = datetime.utcnow()
    months = []
    year, month = today.year, today.month
    for _ in range(6):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    months.reverse()
    start = datetime(months[0][0], months[0][1], 1)

    buckets = {key: {"users": 0, "posts": 0} for key in months}
    for model, field in ((User, "users"), (Post, "posts")):
        result = await db.execute(select(model.created_at).where(model.created_at >= start))
        for created_at in result.scalars().all():
            key = (created_at.year, created_at.month)
            if key in buckets:
                buckets[key][field] += 1

    return [
        GrowthPoint(name=calendar.month_abbr[month], users=buckets[(year, month)]["users"], posts=buckets[(year, month)]["posts"])
        for year, month in months
    ]


# --- SETTINGS ---
@router.get("/settings", response_model=SettingsMap)
async def get_all_settings(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_admin)
):
    return await read_settings(db)


@router.put("/settings", response_model=MessageOut)
async def update_settings(
    payload: Dict[str, Any],
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_admin)
):
    existing = {setting.key: setting for setting in (await db.execute(select(SystemSetting))).scalars().all()}

    for key, value in payload.items():
        value = "" if value is None else str(value)
        if key in existing:
            existing[key].value = value
        else:
            db.add(SystemSetting(key=key, value=value))

    await db.commit()
    logger.info("Admin %s updated settings: %s", current_user["user_id"], ", ".join(payload))
    return MessageOut(message="Settings updated successfully")


# --- LIST USERS ---
@router.get("/users", response_model=AdminUserPage)
async def list_users(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    role: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_admin)
):
    page = max(page, 1)
    limit = max(limit, 1)

    criteria = []
    if search:
        pattern = contains_pattern(search)
        criteria.append(or_(
            User.name.ilike(pattern, escape=LIKE_ESCAPE),
            User.email.ilike(pattern, escape=LIKE_ESCAPE),
            User.school.ilike(pattern, escape=LIKE_ESCAPE),
        ))
    if role:
        try:
            criteria.append(User.role == UserRole(role.upper()))
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role")

    result = await db.execute(
        select(User)
        .where(*criteria)
        .order_by(User.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    total = await count_rows(db, User, *criteria)

    return AdminUserPage(
        users=result.scalars().all(),
        total=total,
        page=page,
        total_pages=_pages(total, limit),
    )


# --- CREATE USER ---
@router.post("/users", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: AdminUserCreate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_admin)
):
    result = await db.execute(select(User).where(User.email == payload.email))
    if result.scalars().first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    new_user = User(
        name=payload.name,
        email=payload.email,
        password=get_password_hash(payload.password),
        role=payload.role or UserRole.ALUNO,
        school=payload.school,
        school_id=payload.school_id,
        verified=True,
    )
    db.add(new_user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    await db.refresh(new_user)
    logger.info("Admin %s created user %s", current_user["user_id"], new_user.id)
    return new_user


# --- EXPORT USERS (CSV / XLSX) ---
@router.get("/users/export")
async def export_users(
    export_format: str = Query("csv", alias="format"),
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_admin)
):
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    users = result.scalars().all()

    if export_format == "xlsx":
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "Users"
        ws.append(EXPORT_HEADER)
        for cell in ws[1]:
            cell.font = Font(bold=True)
            cell.alignment = Alignment(horizontal="center")
        for user in users:
            ws.append([
                user.name,
                user.email,
                user.role.value,
                user.school or "",
                user.created_at.isoformat() if user.created_at else "",
            ])

        buffer = io.BytesIO()
        wb.save(buffer)
        return Response(
            content=buffer.getvalue(),
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": 'attachment; filename="users_export.xlsx"'},
        )

    if export_format != "csv":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unsupported export format")

    def rows():
        yield ",".join(EXPORT_HEADER)
        for user in users:
            created = user.created_at.isoformat() if user.created_at else ""
            yield "\n" + ",".join([
                _csv_field(user.name),
                user.email,
                user.role.value,
                _csv_field(user.school),
                created,
            ])

    return StreamingResponse(
        rows(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="users_export.csv"'},
    )


# --- IMPORT USERS (BULK) ---
@router.post("/users/import", response_model=UserImportResult)
async def import_users(
    payload: UserImportRequest,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_admin)
):
    if not isinstance(payload.users, list):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid data format")

    results = UserImportResult()

    for index, row in enumerate(payload.users, start=1):
        if not isinstance(row, dict):
            results.failed += 1
            results.errors.append(f"Row {index} is not a user object")
            continue

        email = row.get("email")
        email = email.strip() if isinstance(email, str) else None
        name = row.get("name")
        if not email or not name:
            results.failed += 1
            results.errors.append(f"Missing name or email for row {email or '?'}")
            continue

        existing = await db.execute(select(User).where(User.email == email))
        if existing.scalars().first():
            results.failed += 1
            results.errors.append(f"Email {email} already exists")
            continue

        role = str(row.get("role") or "").upper()
        try:
            db.add(User(
                name=str(name),
                email=email,
                role=UserRole(role) if role in UserRole.__members__ else UserRole.ALUNO,
                school=row.get("school"),
                password=get_password_hash(str(row.get("password") or DEFAULT_IMPORT_PASSWORD)),
            ))
            await db.commit()
            results.success += 1
        except (SQLAlchemyError, ValueError) as exc:
            await db.rollback()
            logger.warning("User import failed for %s: %s", email, exc)
            results.failed += 1
            results.errors.append(f"Failed to import {email}")

    logger.info("User import by %s: %d imported, %d failed", current_user["user_id"], results.success, results.failed)
    return results


# --- UPDATE USER ---
@router.put("/users/{user_id}", response_model=UserOut)
async def update_user(
    user_id: str,
    payload: AdminUserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_admin)
):
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    update_data = payload.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in update_data and update_data["email"] != user.email:
        clash = await db.execute(
            select(User).where(User.email == update_data["email"], User.id != user_id)
        )
        if clash.scalars().first():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    for field, value in update_data.items():
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    return user


# --- DELETE USER ---
@router.delete("/users/{user_id}", response_model=MessageOut)
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_admin)
):
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    await db.delete(user)
    await db.commit()
    logger.info("Admin %s deleted user %s", current_user["user_id"], user_id)
    return MessageOut(message="User deleted successfully")


# --- LIST SCHOOLS ---
@router.get("/schools", response_model=SchoolPage)
async def list_schools(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    zone: Optional[Zone] = None,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_admin)
):
    page = max(page, 1)
    limit = max(limit, 1)

    criteria = [User.role == UserRole.ESCOLA]
    if search:
        pattern = contains_pattern(search)
        criteria.append(or_(
            User.name.ilike(pattern, escape=LIKE_ESCAPE),
            User.email.ilike(pattern, escape=LIKE_ESCAPE),
            User.inep.like(pattern, escape=LIKE_ESCAPE),
        ))
    if zone:
        criteria.append(User.zone == zone)

    result = await db.execute(
        select(User)
        .where(*criteria)
        .order_by(User.name)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    total = await count_rows(db, User, *criteria)

    return SchoolPage(
        schools=result.scalars().all(),
        total=total,
        total_pages=_pages(total, limit),
        current_page=page,
    )


# --- CREATE SCHOOL ---
@router.post("/schools", response_model=SchoolOut, status_code=status.HTTP_201_CREATED)
async def create_school(
    payload: SchoolCreate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_admin)
):
    result = await db.execute(select(User).where(User.email == payload.email))
    if result.scalars().first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    new_school = User(
        name=payload.name,
        email=payload.email,
        password=get_password_hash(payload.password),
        role=UserRole.ESCOLA,
        inep=payload.inep,
        zone=payload.zone,
        address=payload.address,
        phone=payload.phone,
        school_type=payload.school_type,
        verified=True,
    )
    db.add(new_school)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    await db.refresh(new_school)
    logger.info("Admin %s created school %s", current_user["user_id"], new_school.id)
    return new_school


# --- IMPORT SCHOOLS (BULK) ---
@router.post("/schools/import", response_model=SchoolImportResult)
async def import_schools(
    payload: SchoolImportRequest,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_admin)
):
    if not isinstance(payload.schools, list):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid data format")

    imported = 0
    errors = []

    for item in payload.schools:
        if not isinstance(item, dict) or not item.get("name") or not item.get("email"):
            errors.append({"item": item, "error": "Missing name or email"})
            continue

        try:
            school = SchoolCreate.model_validate({
                **item,
                "password": item.get("password") or DEFAULT_IMPORT_PASSWORD,
            })
        except ValueError as exc:
            errors.append({"item": item, "error": str(exc).splitlines()[0]})
            continue

        existing = await db.execute(select(User).where(User.email == school.email))
        if existing.scalars().first():
            errors.append({"item": item, "error": "Email already exists"})
            continue

        try:
            db.add(User(
                name=school.name,
                email=school.email,
                password=get_password_hash(school.password),
                role=UserRole.ESCOLA,
                inep=school.inep,
                zone=school.zone,
                address=school.address,
                phone=school.phone,
                school_type=school.school_type,
                verified=True,
            ))
            await db.commit()
            imported += 1
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.warning("School import failed for %s: %s", school.email, exc)
            errors.append({"item": item, "error": "Failed to import school"})

    logger.info("School import by %s: %d imported, %d failed", current_user["user_id"], imported, len(errors))
    return SchoolImportResult(message="Import processed", imported=imported, errors=errors)


# --- SCHOOL IMPORT TEMPLATE ---
@router.get("/schools/template")
async def school_import_template():
    content = (
        "Name,Email,INEP,Zone,SchoolType,Address,Phone,Password\n"
        'EMEF Exemplo,contato@exemplo.edu.br,12345678,URBANA,ESCOLA,"Rua Exemplo, 123",83999999999,muda1234\n'
    )
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="modelo_importacao_escolas.csv"'},
    )
