from datetime import date
from decimal import Decimal

from src.platform.config.core_setting import settings
from src.service.booking.domain.entity.turf_entity import Turf
from src.service.booking.domain.venue_calendar import is_weekend


def is_peak_hour(hour: int) -> bool:
    return settings.PEAK_HOUR_START <= hour <= settings.PEAK_HOUR_END


def hourly_rate(*, turf: Turf, slot_date: date, start_hour: int) -> Decimal:
    """base -> weekend/weekday override -> peak override; the last one set wins"""
    rate = turf.base_price
    day_rate = turf.weekend_price if is_weekend(slot_date) else turf.weekday_price
    if day_rate:
        rate = day_rate
    if is_peak_hour(start_hour) and turf.peak_hour_price:
        rate = turf.peak_hour_price
    return rate


def compute_base_price(*, turf: Turf, slot_date: date, start_hour: int, duration: int) -> Decimal:
    package = turf.package_price(duration)
    if package:
        return package
    return hourly_rate(turf=turf, slot_date=slot_date, start_hour=start_hour) * duration
