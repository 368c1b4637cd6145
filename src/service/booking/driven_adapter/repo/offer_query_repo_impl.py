from typing import Optional

from uuid_utils import UUID

from src.platform.database.asyncpg_setting import get_asyncpg_pool
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_offer_query_repo import IOfferQueryRepo
from src.service.booking.domain.entity.offer_entity import (
    FirstBookingOffer,
    LoyaltyMilestoneOffer,
    Offer,
    PromoCode,
)
from src.service.booking.domain.entity.turf_entity import Turf
from src.service.booking.driven_adapter.repo.row_mapper import (
    row_to_first_booking_offer,
    row_to_loyalty_milestone,
    row_to_offer,
    row_to_promo_code,
)


# Rows attached to the turf, or venue-wide rows of the same operator
_SCOPE = '(turf_id = $1 OR (turf_id IS NULL AND owner_id = $2))'


class OfferQueryRepoImpl(IOfferQueryRepo):
    @Logger.io
    async def list_offers(self, *, turf: Turf) -> list[Offer]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            rows = await conn.fetch(
                f'SELECT * FROM offer WHERE {_SCOPE} ORDER BY created_at, id',
                turf.id,
                turf.owner_id,
            )
            return [row_to_offer(row) for row in rows]

    @Logger.io
    async def list_first_booking_offers(self, *, turf: Turf) -> list[FirstBookingOffer]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            rows = await conn.fetch(
                f'SELECT * FROM first_booking_offer WHERE {_SCOPE} ORDER BY booking_number, id',
                turf.id,
                turf.owner_id,
            )
            return [row_to_first_booking_offer(row) for row in rows]

    @Logger.io
    async def list_loyalty_milestones(self, *, turf: Turf) -> list[LoyaltyMilestoneOffer]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT * FROM loyalty_milestone_offer
                WHERE {_SCOPE}
                ORDER BY milestone_booking_count, id
                """,
                turf.id,
                turf.owner_id,
            )
            return [row_to_loyalty_milestone(row) for row in rows]

    @Logger.io
    async def get_promo_code(self, *, owner_id: UUID, code: str) -> Optional[PromoCode]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            row = await conn.fetchrow(
                'SELECT * FROM promo_code WHERE owner_id = $1 AND code = upper($2)',
                owner_id,
                code.strip(),
            )
            return row_to_promo_code(row) if row else None
