from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import text
from dashboard.config import settings
import structlog

logger = structlog.get_logger()


class Base(DeclarativeBase):
    pass


# Process-wide singletons, created on first use and kept for the process lifetime.
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _get_db_url() -> str:
    """Normalize POSTGRES_URL to the asyncpg driver and strip sslmode (asyncpg takes ssl via connect_args)."""
    url = settings.POSTGRES_URL
    if not url:
        raise RuntimeError("POSTGRES_URL is not configured")
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            url = "postgresql+asyncpg://" + url[len(prefix):]
            break
    url = url.replace("?sslmode=require", "").replace("&sslmode=require", "")
    return url


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        connect_args = {"ssl": settings.DB_SSL} if settings.DB_SSL else {}
        _engine = create_async_engine(
            _get_db_url(),
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=30,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=True,
            echo=settings.DEBUG,
            connect_args=connect_args,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(), class_=AsyncSession, expire_on_commit=False
        )
    return _session_factory


async def get_db():
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db():
    async with get_engine().begin() as conn:
        await conn.execute(text("SELECT 1"))
        logger.info("postgres_connected")


async def close_db():
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("postgres_disconnected")
