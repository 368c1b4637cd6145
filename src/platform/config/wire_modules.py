"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.booking.app.command import (
    acquire_slot_hold_use_case,
    cancel_booking_use_case,
    commit_booking_use_case,
    expire_slot_hold_use_case,
    extend_slot_hold_use_case,
    release_slot_hold_use_case,
)
from src.service.booking.app.query import get_slot_grid_use_case, quote_price_use_case
from src.service.booking.driving_adapter.http_controller import turf_controller


WIRE_MODULES: list[ModuleType] = [
    get_slot_grid_use_case,
    quote_price_use_case,
    acquire_slot_hold_use_case,
    extend_slot_hold_use_case,
    release_slot_hold_use_case,
    expire_slot_hold_use_case,
    commit_booking_use_case,
    cancel_booking_use_case,
    turf_controller,
]
