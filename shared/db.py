# shared/db.py
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from shared.config import DATABASE_URL, SQL_ECHO

engine_kwargs = {"echo": SQL_ECHO}
if DATABASE_URL.startswith("sqlite"):
    # aiosqlite connections are bound to the loop that opened them
    engine_kwargs["poolclass"] = NullPool

engine = create_async_engine(DATABASE_URL, **engine_kwargs)

SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db():
    async with SessionLocal() as session:
        yield session


async def count_rows(db: AsyncSession, model, *criteria) -> int:
    stmt = select(func.count()).select_from(model)
    if criteria:
        stmt = stmt.where(*criteria)
    result = await db.execute(stmt)
    return result.scalar_one()


def contains_pattern(term: str) -> str:
    """LIKE pattern matching ``term`` literally anywhere; pair with ``escape=LIKE_ESCAPE``."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


LIKE_ESCAPE = "\\"
