import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.middleware.cors import CORSMiddleware

from shared.config import FRONTEND_URL, LOG_LEVEL, PORT, UPLOAD_DIR
from shared.db import engine, Base
from shared.errors import register_exception_handlers

# register every table with Base.metadata
import services.user_management.models
import services.content_management.models
import services.social_network.models

from services.user_management.controllers.auth_service import router as auth_router
from services.user_management.controllers.user_service import router as user_router
from services.user_management.controllers.admin_service import router as admin_router
from services.user_management.controllers.settings_service import router as settings_router
from services.content_management.controllers.post_service import router as post_router
from services.content_management.controllers.project_service import router as project_router
from services.content_management.controllers.moderation_service import router as moderation_router
from services.social_network.controllers.social_service import router as social_router
from services.media.controllers.upload_service import router as upload_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("educonnect")


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database ready")
    yield
    await engine.dispose()
    logger.info("Database connections closed")


app = FastAPI(title="EduConnect CG Backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/health")
def health_check():
    return {"status": "OK"}


app.include_router(auth_router)
app.include_router(user_router)
app.include_router(post_router)
app.include_router(project_router)
app.include_router(moderation_router)
app.include_router(admin_router)
app.include_router(settings_router)
app.include_router(social_router)
app.include_router(upload_router)

os.makedirs(UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR), name="uploads")


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=PORT)
