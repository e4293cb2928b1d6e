"""
Integration tests for the seat ledger and the event capacity aggregate

Test Coverage:
1. Reserve is a single conditional decrement; refusal reports what is left
2. Release never exceeds total seats
3. Unknown tier and non-positive quantities
4. Concurrent reservations never oversell
5. Aggregate bounds and recompute
"""

import asyncio
import uuid

import pytest

from src.platform.exception.exceptions import (
    CapacityDriftError,
    StorageFailureError,
    UnknownTierError,
    ValidationError,
)
from test.service.marketplace.integration.helpers import read_counters


class TestTicketTierLedger:
    @pytest.mark.asyncio
    async def test_reserve_decrements_available_seats(self, uow, event, tiers):
        vip, _ = tiers

        async with uow:
            outcome = await uow.ticket_tier_ledger.reserve(tier_id=vip.id, quantity=2)
            await uow.commit()

        assert outcome.reserved
        assert outcome.remaining == 3
        assert (await read_counters(uow, event.id))['VIP'] == 3

    @pytest.mark.asyncio
    async def test_refusal_leaves_counter_untouched(self, uow, event, tiers):
        vip, _ = tiers

        async with uow:
            outcome = await uow.ticket_tier_ledger.reserve(tier_id=vip.id, quantity=6)
            await uow.commit()

        assert not outcome.reserved
        assert outcome.as_shortfall() == {'tier_id': str(vip.id), 'requested': 6, 'available': 5}
        assert (await read_counters(uow, event.id))['VIP'] == 5

    @pytest.mark.asyncio
    async def test_uncommitted_reservation_is_rolled_back(self, uow, event, tiers):
        vip, _ = tiers

        async with uow:
            await uow.ticket_tier_ledger.reserve(tier_id=vip.id, quantity=5)

        assert (await read_counters(uow, event.id))['VIP'] == 5

    @pytest.mark.asyncio
    async def test_release_cannot_exceed_total(self, uow, event, tiers):
        vip, _ = tiers

        async with uow:
            await uow.ticket_tier_ledger.reserve(tier_id=vip.id, quantity=1)
            await uow.commit()

        async with uow:
            with pytest.raises(StorageFailureError):
                await uow.ticket_tier_ledger.release(tier_id=vip.id, quantity=2)

        async with uow:
            assert await uow.ticket_tier_ledger.release(tier_id=vip.id, quantity=1) == 5
            await uow.commit()

    @pytest.mark.asyncio
    async def test_unknown_tier(self, uow, event):
        async with uow:
            with pytest.raises(UnknownTierError):
                await uow.ticket_tier_ledger.reserve(tier_id=uuid.uuid4(), quantity=1)

    @pytest.mark.parametrize('quantity', [0, -1])
    @pytest.mark.asyncio
    async def test_non_positive_quantity(self, uow, event, tiers, quantity):
        vip, _ = tiers

        async with uow:
            with pytest.raises(ValidationError):
                await uow.ticket_tier_ledger.reserve(tier_id=vip.id, quantity=quantity)

    @pytest.mark.asyncio
    async def test_concurrent_reservations_never_oversell(self, uow, uow_factory, event, tiers):
        # Given: 8 separate requests for 1 of the 5 VIP seats
        vip, _ = tiers

        async def reserve_one() -> bool:
            unit = uow_factory()
            async with unit:
                outcome = await unit.ticket_tier_ledger.reserve(tier_id=vip.id, quantity=1)
                await unit.commit()
            return outcome.reserved

        # When
        results = await asyncio.gather(*[reserve_one() for _ in range(8)])

        # Then
        assert results.count(True) == 5
        assert (await read_counters(uow, event.id))['VIP'] == 0


class TestEventCapacityAggregate:
    @pytest.mark.asyncio
    async def test_adjust_stays_within_capacity(self, uow, event):
        async with uow:
            assert await uow.event_capacity_aggregate.adjust(event_id=event.id, delta=-3) == 12
            await uow.commit()

        async with uow:
            with pytest.raises(CapacityDriftError):
                await uow.event_capacity_aggregate.adjust(event_id=event.id, delta=4)

        async with uow:
            with pytest.raises(CapacityDriftError):
                await uow.event_capacity_aggregate.adjust(event_id=event.id, delta=-13)

    @pytest.mark.asyncio
    async def test_recompute_sums_tiers(self, uow, event, tiers):
        vip, regular = tiers

        async with uow:
            await uow.ticket_tier_ledger.reserve(tier_id=vip.id, quantity=2)
            await uow.ticket_tier_ledger.reserve(tier_id=regular.id, quantity=4)
            before, after = await uow.event_capacity_aggregate.recompute(event_id=event.id)
            await uow.commit()

        assert (before, after) == (15, 9)
        assert (await read_counters(uow, event.id))['event'] == 9
