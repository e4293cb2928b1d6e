from abc import ABC, abstractmethod
from typing import List, Optional
import uuid


class ITransactionQueryRepo(ABC):
    """Read-side views of transactions joined with their event and tiers"""

    @abstractmethod
    async def get_detail(self, *, transaction_id: uuid.UUID) -> Optional[dict]:
        pass

    @abstractmethod
    async def list_details(
        self, *, user_id: Optional[uuid.UUID] = None, status: Optional[str] = None
    ) -> List[dict]:
        """user_id None lists every user's transactions (admin queue)"""
        pass
