import time
from typing import Any

import attrs
from uuid_utils import UUID


@attrs.define(frozen=True)
class TurfChangeSignal:
    turf_id: UUID
    entity: str
    action: str
    timestamp: float = attrs.field(factory=time.time)

    def to_payload(self) -> dict[str, Any]:
        return {
            'turf_id': str(self.turf_id),
            'entity': self.entity,
            'action': self.action,
            'timestamp': self.timestamp,
        }
