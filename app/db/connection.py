"""
Database connection management with SQLAlchemy async support.

Supports SQLite (development/tests) and MySQL (production) via DATABASE_URL.
"""
from typing import AsyncIterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from app.db.models import Base
from app.config import settings
import logging

logger = logging.getLogger(__name__)

# Database engine (will be initialized in init_db)
engine = None
async_session_maker = None


async def init_db(database_url: Optional[str] = None):
    """
    Initialize database connection and create tables.

    Args:
        database_url: Optional override of settings.database_url
    """
    global engine, async_session_maker

    database_url = database_url or settings.database_url
    logger.info(f"Initializing database: {database_url.split('://')[0]}")

    if database_url.startswith("sqlite"):
        # StaticPool keeps a single connection so ":memory:" databases survive
        engine = create_async_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(
            database_url,
            echo=False,
            pool_pre_ping=True,  # Verify connections before using
            pool_recycle=3600,   # Recycle connections after 1 hour
        )

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("✅ Database initialized successfully")


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """
    Get database session for dependency injection.

    Usage in FastAPI:
        @router.get("/endpoint")
        async def endpoint(db: AsyncSession = Depends(get_db_session)):
            ...

    Repositories commit their own writes; this only rolls back and closes.
    """
    if async_session_maker is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    async with async_session_maker() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            # Domain errors (not found, validation) also pass through here
            if isinstance(e, SQLAlchemyError):
                logger.error(f"Database session error: {e}")
            raise
        finally:
            await session.close()


async def close_db():
    """Close database connection."""
    global engine, async_session_maker
    if engine:
        await engine.dispose()
        engine = None
        async_session_maker = None
        logger.info("Database connection closed")
