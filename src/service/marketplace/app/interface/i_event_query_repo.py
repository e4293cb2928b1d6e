from abc import ABC, abstractmethod
from typing import List, Optional
import uuid

from src.service.marketplace.domain.entity.event_entity import Event


class IEventQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, event_id: uuid.UUID) -> Optional[Event]:
        pass

    @abstractmethod
    async def list_events(self) -> List[Event]:
        pass
