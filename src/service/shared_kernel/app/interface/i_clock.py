from abc import ABC, abstractmethod
from datetime import datetime


class IClock(ABC):
    """Source of the current instant; hold expiry is always compared against it"""

    @abstractmethod
    def now(self) -> datetime:
        """Timezone-aware UTC now"""
        pass
