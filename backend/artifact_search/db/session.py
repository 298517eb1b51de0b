"""
Database session management for the review-status store
Async SQLAlchemy setup with PostgreSQL/SQLite support
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import text
import asyncio
import logging

from artifact_search.core.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


def create_engine_for_url(database_url: str) -> AsyncEngine:
    """Create an async engine tuned for the backing database"""
    if "postgresql" in database_url.lower():
        return create_async_engine(
            database_url,
            echo=False,
            pool_size=10,
            max_overflow=5,
            pool_timeout=3,        # fail fast when the pool is exhausted
            pool_recycle=3600,
            pool_pre_ping=True,
            connect_args={
                "command_timeout": 30,
                "server_settings": {
                    "application_name": "artifact_catalogue_search",
                    "statement_timeout": "30s"
                }
            }
        )

    return create_async_engine(
        database_url,
        echo=False,
        connect_args={
            "check_same_thread": False,
            "timeout": 10
        }
    )


DATABASE_URL = settings.DATABASE_URL
engine = create_engine_for_url(DATABASE_URL)

logger.info(
    f"Review-status database engine created for "
    f"{'PostgreSQL' if 'postgresql' in DATABASE_URL.lower() else 'SQLite'}"
)

# Sessions are read-mostly; each store call opens its own
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


async def init_db():
    """Create review-status tables when they do not exist"""
    from artifact_search.models import models  # noqa: F401  registers tables

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Review-status tables created/verified")


async def validate_db_setup() -> bool:
    """Validate database connectivity"""
    try:
        async with asyncio.timeout(10):
            async with engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
        logger.info("Review-status database connectivity validated")
        return True
    except asyncio.TimeoutError:
        logger.error("Review-status database validation timed out")
        return False
    except Exception as e:
        logger.error(f"Review-status database validation failed: {e}")
        return False


async def cleanup_db_connections():
    """Dispose pooled connections on shutdown"""
    await engine.dispose()
    logger.info("Review-status database connections disposed")
