"""
SQLAlchemy schema management

The booking store talks to PostgreSQL through raw asyncpg queries; SQLAlchemy
only declares the schema (driven_adapter/model) and creates the tables.
"""

import asyncio
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


class Base(DeclarativeBase):
    pass


_engine: Optional[AsyncEngine] = None
_engine_loop: Optional[asyncio.AbstractEventLoop] = None


def get_engine() -> AsyncEngine:
    """Event-loop-aware engine; recreated when the running loop changes"""
    global _engine, _engine_loop
    current_loop = asyncio.get_running_loop()
    if _engine is None or _engine_loop is not current_loop:
        Logger.base.info(f'🔗 [DB] Creating engine for event loop {id(current_loop)}')
        _engine = create_async_engine(settings.DATABASE_URL_ASYNC, echo=False, future=True)
        _engine_loop = current_loop
    return _engine


async def create_db_and_tables() -> None:
    """Create database tables if they don't exist"""
    # Register every model on Base.metadata
    import src.service.booking.driven_adapter.model  # noqa: F401

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    Logger.base.info('🗄️  [DB] Tables ensured')


async def dispose_engine() -> None:
    global _engine, _engine_loop
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _engine_loop = None
