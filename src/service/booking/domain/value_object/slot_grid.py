from datetime import date
from typing import Optional

import attrs
from uuid_utils import UUID

from src.service.booking.domain.enum.slot_status import SlotStatus


@attrs.define(frozen=True)
class SlotCell:
    turf_id: UUID
    slot_date: date
    hour: int
    status: SlotStatus

    @property
    def is_selectable(self) -> bool:
        return self.status in (SlotStatus.AVAILABLE, SlotStatus.HELD_BY_SELF)


@attrs.define(frozen=True)
class SlotGrid:
    """Date x hour matrix of slot cells, ordered by date then hour."""

    turf_id: UUID
    dates: list[date] = attrs.field(factory=list)
    hours: list[int] = attrs.field(factory=list)
    cells: list[SlotCell] = attrs.field(factory=list)

    @classmethod
    def empty(cls, turf_id: UUID) -> 'SlotGrid':
        return cls(turf_id=turf_id)

    @property
    def is_empty(self) -> bool:
        return not self.cells

    def cell(self, *, slot_date: date, hour: int) -> Optional[SlotCell]:
        for cell in self.cells:
            if cell.slot_date == slot_date and cell.hour == hour:
                return cell
        return None

    def row(self, slot_date: date) -> list[SlotCell]:
        return [cell for cell in self.cells if cell.slot_date == slot_date]
