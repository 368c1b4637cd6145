"""Shared Kernel Value Objects"""

from src.service.shared_kernel.domain.value_object.turf_change_signal import TurfChangeSignal

__all__ = ['TurfChangeSignal']
