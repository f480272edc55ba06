# services/content_management/controllers/project_service.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.future import select

from services.content_management.models.projects import Project
from services.content_management.schemas.projects import ProjectCreate, ProjectOut
from shared.db import get_db, contains_pattern, LIKE_ESCAPE
from shared.auth import get_current_user, is_owner_or_admin
from shared.schemas import MessageOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["Projects"])


def _projects_query():
    return select(Project).options(selectinload(Project.author)).order_by(Project.created_at.desc())


# --- LIST ---
@router.get("", response_model=List[ProjectOut])
async def list_projects(db: AsyncSession = Depends(get_db)):
    result = await db.execute(_projects_query().limit(50))
    return result.scalars().all()


# --- BY CATEGORY ---
@router.get("/category/{category}", response_model=List[ProjectOut])
async def projects_by_category(category: str, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        _projects_query().where(Project.category.ilike(contains_pattern(category), escape=LIKE_ESCAPE))
    )
    return result.scalars().all()


# --- GET ONE ---
@router.get("/{project_id}", response_model=ProjectOut)
async def get_project(project_id: str, db: AsyncSession = Depends(get_db)):
    result = await db.execute(_projects_query().where(Project.id == project_id))
    project = result.scalars().first()
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


# --- CREATE ---
@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    title = payload.title.strip()
    description = payload.description.strip()
    if not title or not description:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Title and description are required"
        )

    project = Project(
        title=title,
        description=description,
        image=payload.image,
        category=(payload.category or "").strip() or "Geral",
        author_id=current_user["user_id"],
    )
    db.add(project)
    await db.commit()
    logger.info("User %s created project %s", current_user["user_id"], project.id)

    result = await db.execute(
        _projects_query()
        .where(Project.id == project.id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


# --- DELETE ---
@router.delete("/{project_id}", response_model=MessageOut)
async def delete_project(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    project = await db.get(Project, project_id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    if not is_owner_or_admin(current_user, project.author_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")

    await db.delete(project)
    await db.commit()
    logger.info("User %s deleted project %s", current_user["user_id"], project_id)
    return MessageOut(message="Project deleted")
