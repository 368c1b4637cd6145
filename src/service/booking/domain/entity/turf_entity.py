from datetime import date
from decimal import Decimal
from typing import Optional

import attrs
from uuid_utils import UUID


@attrs.define(frozen=True)
class Turf:
    id: UUID
    owner_id: UUID
    name: str
    sport_type: str = 'football'
    is_public: bool = True
    operating_hours_start: int = 6
    operating_hours_end: int = 23  # 0 means the venue closes at midnight
    base_price: Decimal = Decimal('0')
    price_1h: Optional[Decimal] = None
    price_2h: Optional[Decimal] = None
    price_3h: Optional[Decimal] = None
    weekday_price: Optional[Decimal] = None
    weekend_price: Optional[Decimal] = None
    peak_hour_price: Optional[Decimal] = None

    @property
    def opening_hour(self) -> int:
        return self.operating_hours_start

    @property
    def closing_hour(self) -> int:
        return 24 if self.operating_hours_end == 0 else self.operating_hours_end

    def operating_hours(self) -> range:
        return range(self.opening_hour, self.closing_hour)

    def covers(self, *, start_hour: int, end_hour: int) -> bool:
        return self.opening_hour <= start_hour < end_hour <= self.closing_hour

    def package_price(self, duration: int) -> Optional[Decimal]:
        return {1: self.price_1h, 2: self.price_2h, 3: self.price_3h}.get(duration)


@attrs.define(frozen=True)
class BlockedSlot:
    """Operator maintenance window; the engine only reads these."""

    id: UUID
    turf_id: UUID
    blocked_date: date
    start_hour: int
    end_hour: int
    reason: str = ''

    def occupies(self, hour: int) -> bool:
        return self.start_hour <= hour < self.end_hour
