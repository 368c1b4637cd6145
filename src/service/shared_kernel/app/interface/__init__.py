"""Shared Kernel Interfaces"""

from src.service.shared_kernel.app.interface.i_clock import IClock
from src.service.shared_kernel.app.interface.i_turf_change_notifier import ITurfChangeNotifier

__all__ = ['IClock', 'ITurfChangeNotifier']
