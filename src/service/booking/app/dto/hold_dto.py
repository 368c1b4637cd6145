import attrs

from src.service.booking.domain.entity.slot_hold_entity import SlotHold


@attrs.define(frozen=True)
class HoldStatus:
    hold: SlotHold
    remaining_seconds: int
