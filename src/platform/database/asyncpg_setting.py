import asyncio

import asyncpg
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


# Global connection pools per event loop
asyncpg_pools: dict[int, asyncpg.Pool] = {}


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Initialize each connection with UUID codec"""

    def _uuid_decoder(value: bytes) -> UUID:
        """Decode PostgreSQL UUID binary data to uuid_utils.UUID"""
        return UUID(bytes=value)

    def _uuid_encoder(value: UUID) -> bytes:
        """Encode uuid_utils.UUID to binary for PostgreSQL"""
        return value.bytes

    await conn.set_type_codec(
        'uuid',
        encoder=_uuid_encoder,
        decoder=_uuid_decoder,
        schema='pg_catalog',
        format='binary',
    )


async def get_asyncpg_pool() -> asyncpg.Pool:
    current_loop = asyncio.get_running_loop()
    loop_id = id(current_loop)

    # Fast path: pool already exists for this loop
    if loop_id in asyncpg_pools:
        pool = asyncpg_pools[loop_id]
        Logger.base.debug(
            f'📊 [Pool Stats] size={pool.get_size()}, free={pool.get_idle_size()}, '
            f'max={pool.get_max_size()}, min={pool.get_min_size()}'
        )
        return pool

    # Slow path: create new pool (should only happen at startup)
    pool = await asyncpg.create_pool(
        settings.ASYNCPG_DSN,
        min_size=settings.ASYNCPG_POOL_MIN_SIZE,
        max_size=settings.ASYNCPG_POOL_MAX_SIZE,
        command_timeout=settings.ASYNCPG_POOL_COMMAND_TIMEOUT,
        timeout=settings.ASYNCPG_POOL_TIMEOUT,
        init=_init_connection,  # Initialize each connection with UUID codec
    )

    asyncpg_pools[loop_id] = pool

    return asyncpg_pools[loop_id]


async def warmup_asyncpg_pool() -> int:
    """
    Strategy:
    1. Acquire MIN_SIZE connections from pool
    2. Release them all back to pool
    3. All connections now in warm pool ready for immediate use
    """
    pool = await get_asyncpg_pool()
    connections = []

    Logger.base.info(
        f'🔥 [Pool Warmup] Starting warmup (target={settings.ASYNCPG_POOL_MIN_SIZE})...'
    )
    try:
        for i in range(settings.ASYNCPG_POOL_MIN_SIZE):
            try:
                connections.append(await pool.acquire(timeout=5.0))
            except asyncio.TimeoutError:
                Logger.base.warning(f'   ⚠️  Pool warmup timeout at {i + 1} connections')
                break
    finally:
        for conn in connections:
            await pool.release(conn)

    Logger.base.info(
        f'✅ [Pool Warmup] Completed: {len(connections)} connections ready '
        f'(size={pool.get_size()}, idle={pool.get_idle_size()})'
    )
    return len(connections)


async def close_all_asyncpg_pools() -> None:
    """
    Close all asyncpg connection pools across all event loops

    Warning: Only call this during application shutdown.
    """
    for _, pool in list(asyncpg_pools.items()):
        try:
            await pool.close()
        except (OSError, asyncpg.PostgresError) as e:
            Logger.base.warning(f'⚠️ [Pool] Error while closing pool: {e}')
    asyncpg_pools.clear()
