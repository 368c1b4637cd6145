from abc import ABC, abstractmethod
from typing import Optional

from uuid_utils import UUID

from src.service.booking.domain.entity.turf_entity import Turf


class ITurfQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, turf_id: UUID) -> Optional[Turf]:
        pass
