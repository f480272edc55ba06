# services/user_management/models/settings.py
from sqlalchemy import Column, String, Text
from shared.db import Base


class SystemSetting(Base):
    __tablename__ = "system_settings"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)


PUBLIC_SETTING_KEYS = ("APP_NAME", "PRIMARY_COLOR", "LOGO_URL", "FAVICON_URL")
