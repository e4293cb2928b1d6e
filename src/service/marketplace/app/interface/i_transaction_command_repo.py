from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional, Tuple
import uuid

from src.service.marketplace.domain.entity.transaction_entity import (
    Transaction,
    TransactionStatus,
)


class ITransactionCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, transaction: Transaction) -> Transaction:
        """Insert the transaction and all of its items in the current unit of work"""
        pass

    @abstractmethod
    async def delete(self, *, transaction_id: uuid.UUID) -> None:
        """Compensation only: remove a still-born checkout and its items"""
        pass

    @abstractmethod
    async def get_by_id(self, *, transaction_id: uuid.UUID) -> Optional[Transaction]:
        pass

    @abstractmethod
    async def compare_and_set_status(
        self,
        *,
        transaction_id: uuid.UUID,
        expected: Iterable[TransactionStatus],
        target: TransactionStatus,
        now: datetime,
        proof_url: Optional[str] = None,
    ) -> Optional[Transaction]:
        """
        Flip status only if it is still one of ``expected``.

        Returns:
            The updated transaction (without items), or None when another writer got there first
        """
        pass

    @abstractmethod
    async def list_expirable_keys(
        self,
        *,
        statuses: Iterable[TransactionStatus],
        created_before: datetime,
        limit: int,
        after: Optional[Tuple[datetime, uuid.UUID]] = None,
    ) -> List[Tuple[datetime, uuid.UUID]]:
        """
        ``(created_at, id)`` keys, oldest first.

        ``after`` is the last key of the previous page; only strictly later keys are
        returned, so a caller paging with it always moves forward.
        """
        pass

    @abstractmethod
    async def held_quantities_by_tier(
        self, *, event_id: uuid.UUID, statuses: Iterable[TransactionStatus]
    ) -> dict[uuid.UUID, int]:
        pass
