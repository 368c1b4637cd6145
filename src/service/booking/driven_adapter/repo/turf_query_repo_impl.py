from typing import Optional

from uuid_utils import UUID

from src.platform.database.asyncpg_setting import get_asyncpg_pool
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_turf_query_repo import ITurfQueryRepo
from src.service.booking.domain.entity.turf_entity import Turf
from src.service.booking.driven_adapter.repo.row_mapper import TURF_COLUMNS, row_to_turf


class TurfQueryRepoImpl(ITurfQueryRepo):
    @Logger.io
    async def get_by_id(self, *, turf_id: UUID) -> Optional[Turf]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            row = await conn.fetchrow(f'SELECT {TURF_COLUMNS} FROM turf WHERE id = $1', turf_id)
            return row_to_turf(row) if row else None
