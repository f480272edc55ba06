# shared/config.py
import os
from dotenv import load_dotenv

load_dotenv()

PORT = int(os.getenv("PORT", "5000"))
JWT_SECRET = os.getenv("JWT_SECRET", "secret")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./educonnect.db")
UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join("public", "uploads"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")
