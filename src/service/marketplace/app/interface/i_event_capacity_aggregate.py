from abc import ABC, abstractmethod
import uuid


class IEventCapacityAggregate(ABC):
    """Sole writer of ``event.available_seats``; always called in the ledger move's unit of work."""

    @abstractmethod
    async def adjust(self, *, event_id: uuid.UUID, delta: int) -> int:
        """
        Add ``delta`` keeping 0 <= available_seats <= capacity.

        Raises:
            CapacityDriftError: the bound would be violated
        """
        pass

    @abstractmethod
    async def recompute(self, *, event_id: uuid.UUID) -> tuple[int, int]:
        """Set available_seats to the sum of its tiers; returns (before, after)."""
        pass
