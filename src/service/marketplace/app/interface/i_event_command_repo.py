from abc import ABC, abstractmethod

from src.service.marketplace.domain.entity.event_entity import Event


class IEventCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, event: Event) -> Event:
        """Insert the event together with its tiers"""
        pass
