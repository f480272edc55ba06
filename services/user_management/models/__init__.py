from .users import User, UserRole, SchoolType, Zone
from .follows import UserFollow
from .settings import SystemSetting, PUBLIC_SETTING_KEYS
