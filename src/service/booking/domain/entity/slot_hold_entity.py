from datetime import date, datetime, timedelta
import math
from typing import Optional

import attrs
from uuid_utils import UUID

from src.platform.exception.exceptions import (
    ExpiredHoldError,
    PermissionDeniedError,
    ValidationError,
)


@attrs.define(frozen=True)
class SlotHold:
    """
    Time-boxed soft lock on a contiguous hour window.

    A hold is live only while ``now < expires_at``; an expired row is treated as
    absent by every reader whether or not it has been deleted yet.
    """

    id: UUID
    turf_id: UUID
    hold_date: date
    start_hour: int
    end_hour: int
    session_id: str
    expires_at: datetime
    created_at: datetime

    @classmethod
    def create(
        cls,
        *,
        id: UUID,
        turf_id: UUID,
        hold_date: date,
        start_hour: int,
        duration: int,
        session_id: str,
        now: datetime,
        ttl_seconds: int,
    ) -> 'SlotHold':
        if not session_id:
            raise ValidationError('session_id is required')
        if duration < 1:
            raise ValidationError('duration must be at least 1 hour')
        return cls(
            id=id,
            turf_id=turf_id,
            hold_date=hold_date,
            start_hour=start_hour,
            end_hour=start_hour + duration,
            session_id=session_id,
            expires_at=now + timedelta(seconds=ttl_seconds),
            created_at=now,
        )

    @property
    def duration(self) -> int:
        return self.end_hour - self.start_hour

    def is_live(self, now: datetime) -> bool:
        return now < self.expires_at

    def occupies(self, hour: int) -> bool:
        return self.start_hour <= hour < self.end_hour

    def overlaps(self, *, start_hour: int, end_hour: int) -> bool:
        return self.start_hour < end_hour and start_hour < self.end_hour

    def remaining_seconds(self, now: datetime) -> int:
        """Whole seconds left, rounded up so a live hold never reports 0."""
        return max(0, math.ceil((self.expires_at - now).total_seconds()))

    def is_owned_by(self, session_id: Optional[str]) -> bool:
        return bool(session_id) and self.session_id == session_id

    def with_end_hour(self, end_hour: int) -> 'SlotHold':
        return attrs.evolve(self, end_hour=end_hour)

    def ensure_usable_by(self, *, session_id: Optional[str], now: datetime) -> None:
        """
        Raises:
            PermissionDeniedError: Hold belongs to another session
            ExpiredHoldError: Deadline has passed
        """
        if not self.is_owned_by(session_id):
            raise PermissionDeniedError('Hold belongs to another session')
        if not self.is_live(now):
            raise ExpiredHoldError()
