from abc import ABC, abstractmethod
from typing import Iterable, List
import uuid

from src.service.marketplace.domain.entity.event_entity import TicketTier
from src.service.marketplace.domain.value_object.cart import ReservationOutcome
from src.service.marketplace.domain.value_object.lifecycle_result import TierDrift


class ITicketTierLedger(ABC):
    """
    Sole writer of ``ticket_tier.available_seats``.

    Every write is a single conditional statement, so concurrent callers can
    never drive a tier below zero or above its total seats.
    """

    @abstractmethod
    async def reserve(self, *, tier_id: uuid.UUID, quantity: int) -> ReservationOutcome:
        """
        Take ``quantity`` seats if at least that many are available.

        Returns:
            ReservationOutcome with reserved=False and the observed availability
            when the tier has fewer seats left. Never raises for a shortfall.
        """
        pass

    @abstractmethod
    async def release(self, *, tier_id: uuid.UUID, quantity: int) -> int:
        """
        Return ``quantity`` seats, bounded by the tier's total seats.

        Raises:
            StorageFailureError: the bound would be exceeded (counter drift)
        """
        pass

    @abstractmethod
    async def get_tiers(self, *, event_id: uuid.UUID) -> List[TicketTier]:
        pass

    @abstractmethod
    async def get_tiers_by_ids(self, *, tier_ids: Iterable[uuid.UUID]) -> List[TicketTier]:
        pass

    @abstractmethod
    async def reset_from_holdings(self, *, tier_id: uuid.UUID, held_quantity: int) -> TierDrift:
        """Reconciliation only: available = total - held."""
        pass
