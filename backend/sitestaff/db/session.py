from typing import Any, Dict

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from sitestaff.core.config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    """
    Pool options for the configured backend. SQLite (local runs) gets the
    driver defaults; PostgreSQL gets a sized, pre-pinged pool.
    """
    options: Dict[str, Any] = {"echo": settings.SQLALCHEMY_ECHO}
    if database_url.startswith("sqlite"):
        return options
    options.update(
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_recycle=3600,  # below typical server idle timeouts
        pool_timeout=30,
    )
    return options


engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

# expire_on_commit=False: services return ORM rows after committing
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def check_db_connection() -> bool:
    """Used by /health; any driver or network failure counts as down."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError):
        return False
