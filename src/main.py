"""
Production FastAPI Application

Store and change-channel backends are chosen by STORE_BACKEND and
CHANGE_CHANNEL_BACKEND; external connections are opened only for the
backends in use.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.asyncpg_setting import (
    close_all_asyncpg_pools,
    get_asyncpg_pool,
    warmup_asyncpg_pool,
)
from src.platform.database.orm_db_setting import create_db_and_tables, dispose_engine
from src.platform.logging.loguru_io import Logger
from src.platform.state.kvrocks_client import kvrocks_client


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Turf Booking] Starting up...')

    # Wire dependency injection for all modules
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Turf Booking] Dependency injection wired')

    if settings.STORE_BACKEND == 'postgres':
        # Schema is declared by the SQLAlchemy models; queries run on asyncpg
        await create_db_and_tables()
        Logger.base.info('🗄️  [Turf Booking] Database schema ensured')

        await get_asyncpg_pool()
        await warmup_asyncpg_pool()
        Logger.base.info('🏊 [Turf Booking] Asyncpg pool initialized and warmed up')
    else:
        Logger.base.info('🧠 [Turf Booking] Using in-memory store')

    if settings.CHANGE_CHANNEL_BACKEND == 'kvrocks':
        # Fail fast when the pub/sub backend is unreachable
        await kvrocks_client.initialize()
        Logger.base.info('📡 [Turf Booking] Kvrocks initialized')

    Logger.base.info('✅ [Turf Booking] All services initialized')

    yield

    Logger.base.info('🛑 [Turf Booking] Shutting down...')

    if settings.STORE_BACKEND == 'postgres':
        await close_all_asyncpg_pools()
        await dispose_engine()
        Logger.base.info('🏊 [Turf Booking] Database connections closed')

    if settings.CHANGE_CHANNEL_BACKEND == 'kvrocks':
        await kvrocks_client.disconnect()
        Logger.base.info('📡 [Turf Booking] Kvrocks disconnected')

    container.unwire()

    Logger.base.info('👋 [Turf Booking] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
