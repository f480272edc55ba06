# services/user_management/controllers/settings_service.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from services.user_management.models.settings import PUBLIC_SETTING_KEYS
from services.user_management.controllers.admin_service import read_settings
from services.user_management.schemas.settings import SettingsMap
from shared.db import get_db

router = APIRouter(prefix="/api/settings", tags=["Settings"])


# --- PUBLIC BRANDING SETTINGS ---
@router.get("", response_model=SettingsMap)
async def get_public_settings(db: AsyncSession = Depends(get_db)):
    """Branding values the frontend needs before login; everything else stays admin-only."""
    return await read_settings(db, keys=PUBLIC_SETTING_KEYS)
