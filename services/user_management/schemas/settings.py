# services/user_management/schemas/settings.py
from typing import Dict, Optional, List
from datetime import datetime

from shared.schemas import CamelModel
from services.user_management.schemas.users import AdminUserListItem


class CountTrend(CamelModel):
    total: int
    trend: str


class PendingTrend(CamelModel):
    pending: int
    trend: str


class AdminStatsOut(CamelModel):
    users: CountTrend
    posts: CountTrend
    moderation: PendingTrend
    recent_users: List[AdminUserListItem]


class GrowthPoint(CamelModel):
    name: str
    users: int
    posts: int


SettingsMap = Dict[str, Optional[str]]
