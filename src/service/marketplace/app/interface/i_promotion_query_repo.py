from abc import ABC, abstractmethod
from typing import Optional
import uuid

from src.service.marketplace.domain.entity.promotion_entity import Promotion


class IPromotionQueryRepo(ABC):
    @abstractmethod
    async def find_by_code(self, *, event_id: uuid.UUID, code: str) -> Optional[Promotion]:
        """Case-insensitive match of ``code`` within the event"""
        pass
