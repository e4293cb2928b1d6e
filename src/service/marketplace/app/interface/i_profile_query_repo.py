from abc import ABC, abstractmethod
from typing import Optional
import uuid

from src.service.marketplace.domain.entity.user_entity import UserRole


class IProfileQueryRepo(ABC):
    @abstractmethod
    async def get_role(self, *, user_id: uuid.UUID) -> Optional[UserRole]:
        pass
