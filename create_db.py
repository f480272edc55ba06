# create_db.py
import asyncio
import os

from sqlalchemy import select

from shared.db import engine, Base, SessionLocal
from shared.auth import get_password_hash

# Import all models here so they are registered with SQLAlchemy's metadata
import services.user_management.models
import services.content_management.models
import services.social_network.models
from services.user_management.models.users import User, UserRole
from services.user_management.models.settings import SystemSetting

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@educonnect.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

DEFAULT_SETTINGS = {
    "APP_NAME": "EduConnect CG",
    "PRIMARY_COLOR": "#2563eb",
    "LOGO_URL": "",
    "FAVICON_URL": "",
}


async def init_models():
    async with engine.begin() as conn:
        print("Creating tables...")
        await conn.run_sync(Base.metadata.create_all)
        print("Tables created.")


async def seed():
    async with SessionLocal() as db:
        result = await db.execute(select(User).where(User.email == ADMIN_EMAIL))
        if result.scalars().first():
            print(f"Admin {ADMIN_EMAIL} already exists.")
        else:
            db.add(User(
                email=ADMIN_EMAIL,
                password=get_password_hash(ADMIN_PASSWORD),
                name="Administrador",
                role=UserRole.ADMIN,
                verified=True,
            ))
            print(f"Admin {ADMIN_EMAIL} created.")

        for key, value in DEFAULT_SETTINGS.items():
            if not await db.get(SystemSetting, key):
                db.add(SystemSetting(key=key, value=value))

        await db.commit()
        print("Default settings stored.")


async def main():
    await init_models()
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
