import uuid

import attrs


@attrs.frozen
class SweepResult:
    expired_count: int = 0
    released_seat_count: int = 0
    failed_count: int = 0


@attrs.frozen
class TierDrift:
    tier_id: uuid.UUID
    available_before: int
    available_after: int

    @property
    def drift(self) -> int:
        return self.available_after - self.available_before


@attrs.frozen
class ReconciliationReport:
    event_id: uuid.UUID
    event_available_before: int
    event_available_after: int
    tiers: tuple[TierDrift, ...] = ()

    @property
    def repaired(self) -> bool:
        return self.event_available_before != self.event_available_after or any(
            tier.drift for tier in self.tiers
        )
