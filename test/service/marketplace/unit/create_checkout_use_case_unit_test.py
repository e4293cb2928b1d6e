"""
Unit tests for CreateCheckoutUseCase

Test Coverage:
1. Happy path: transaction, items and both seat counters
2. Validation: unknown tier, empty cart, every shortfall reported
3. Server-side pricing with vouchers
4. Reservation refusal after the pre-check and its compensation
5. Concurrent buyers never oversell a tier
6. Every request is counted once under the outcome that ended it
"""

import asyncio
from datetime import date
from unittest.mock import AsyncMock
import uuid

from prometheus_client import REGISTRY
import pytest

from src.platform.exception.exceptions import (
    InsufficientStockError,
    NotFoundError,
    PromotionNotFoundError,
    StorageFailureError,
    UnknownTierError,
    ValidationError,
)
from src.service.marketplace.app.command.create_checkout_use_case import CreateCheckoutUseCase
from src.service.marketplace.domain.entity.event_entity import TierSpec
from src.service.marketplace.domain.entity.promotion_entity import DiscountType, Promotion
from src.service.marketplace.domain.entity.transaction_entity import TransactionStatus
from src.service.marketplace.domain.value_object.cart import CartLine
from test.service.marketplace.fakes import FakeUnitOfWork, InMemoryStore, utc


pytestmark = pytest.mark.unit

NOW = utc(2026, 10, 17, 9, 0)


class CheckoutFixture:
    def setup_method(self):
        self.store = InMemoryStore()
        self.event = self.store.add_event(
            tiers=[TierSpec('VIP', 1500, 5), TierSpec('Regular', 500, 10)]
        )
        self.vip, self.regular = sorted(self.event.tiers, key=lambda t: t.name != 'VIP')
        self.buyer = uuid.uuid4()
        self.promotion_query_repo = AsyncMock()
        self.promotion_query_repo.find_by_code = AsyncMock(return_value=None)
        self.use_case = self._use_case()

    def _use_case(self) -> CreateCheckoutUseCase:
        return CreateCheckoutUseCase(
            uow=FakeUnitOfWork(self.store), promotion_query_repo=self.promotion_query_repo
        )

    def _available(self, tier) -> int:
        return self.store.tiers[tier.id].available_seats

    def _event_available(self) -> int:
        return self.store.events[self.event.id].available_seats


class TestCreateCheckout(CheckoutFixture):
    @pytest.mark.asyncio
    async def test_checkout_reserves_seats_and_creates_transaction(self):
        # When
        transaction = await self.use_case.execute(
            event_id=self.event.id,
            user_id=self.buyer,
            lines=[CartLine(self.vip.id, 2), CartLine(self.regular.id, 3)],
            now=NOW,
        )

        # Then: priced server side
        assert transaction.status == TransactionStatus.AWAITING_PAYMENT
        assert transaction.subtotal_amount == 2 * 1500 + 3 * 500
        assert transaction.paid_amount == transaction.subtotal_amount
        assert transaction.quantities_by_tier() == {self.vip.id: 2, self.regular.id: 3}

        # And: both counters moved together
        assert self._available(self.vip) == 3
        assert self._available(self.regular) == 7
        assert self._event_available() == 10
        assert transaction.id in self.store.transactions

    @pytest.mark.asyncio
    async def test_duplicate_lines_are_merged_into_one_item(self):
        transaction = await self.use_case.execute(
            event_id=self.event.id,
            user_id=self.buyer,
            lines=[CartLine(self.vip.id, 1), CartLine(self.vip.id, 2)],
            now=NOW,
        )

        assert len(transaction.items) == 1
        assert transaction.items[0].quantity == 3
        assert self._available(self.vip) == 2

    @pytest.mark.asyncio
    async def test_unknown_event(self):
        with pytest.raises(NotFoundError):
            await self.use_case.execute(
                event_id=uuid.uuid4(), user_id=self.buyer, lines=[CartLine(self.vip.id, 1)]
            )

    @pytest.mark.asyncio
    async def test_tier_from_another_event_is_unknown(self):
        stray = uuid.uuid4()

        with pytest.raises(UnknownTierError) as exc_info:
            await self.use_case.execute(
                event_id=self.event.id,
                user_id=self.buyer,
                lines=[CartLine(self.vip.id, 1), CartLine(stray, 1)],
            )

        assert exc_info.value.details == {'missing_tier_ids': [str(stray)]}
        assert self.store.transactions == {}

    @pytest.mark.asyncio
    async def test_empty_cart(self):
        with pytest.raises(ValidationError):
            await self.use_case.execute(event_id=self.event.id, user_id=self.buyer, lines=[])

    @pytest.mark.asyncio
    async def test_every_shortfall_is_reported(self):
        with pytest.raises(InsufficientStockError) as exc_info:
            await self.use_case.execute(
                event_id=self.event.id,
                user_id=self.buyer,
                lines=[CartLine(self.vip.id, 6), CartLine(self.regular.id, 11)],
            )

        assert sorted(s['requested'] for s in exc_info.value.shortfalls) == [6, 11]
        assert self.store.transactions == {}
        assert self._event_available() == 15

    @pytest.mark.asyncio
    async def test_percent_voucher(self):
        self.promotion_query_repo.find_by_code = AsyncMock(
            return_value=Promotion(
                id=uuid.uuid4(),
                event_id=self.event.id,
                code='EARLYBIRD',
                discount_type=DiscountType.PERCENT,
                discount_value=15,
                start_date=date(2026, 10, 1),
                end_date=date(2026, 10, 31),
            )
        )

        transaction = await self.use_case.execute(
            event_id=self.event.id,
            user_id=self.buyer,
            lines=[CartLine(self.regular.id, 3)],
            voucher_code=' earlybird ',
            now=NOW,
        )

        # 1500 * 15% = 225
        assert transaction.discount_amount == 225
        assert transaction.paid_amount == 1275
        assert transaction.voucher_code == 'EARLYBIRD'
        self.promotion_query_repo.find_by_code.assert_awaited_once_with(
            event_id=self.event.id, code='EARLYBIRD'
        )

    @pytest.mark.asyncio
    async def test_unknown_voucher_creates_nothing(self):
        with pytest.raises(PromotionNotFoundError):
            await self.use_case.execute(
                event_id=self.event.id,
                user_id=self.buyer,
                lines=[CartLine(self.vip.id, 1)],
                voucher_code='NOPE',
                now=NOW,
            )

        assert self.store.transactions == {}
        assert self._available(self.vip) == 5

    @pytest.mark.asyncio
    async def test_refusal_after_precheck_rolls_back_granted_tiers(self):
        # Given: another buyer drains the second tier between pre-check and reservation
        first, second = sorted([self.vip, self.regular], key=lambda t: t.id)

        def drain(tier_id):
            if tier_id == second.id:
                self.store.tiers[second.id].available_seats = 0

        self.store.before_reserve = drain

        # When
        with pytest.raises(InsufficientStockError) as exc_info:
            await self.use_case.execute(
                event_id=self.event.id,
                user_id=self.buyer,
                lines=[CartLine(first.id, 2), CartLine(second.id, 2)],
                now=NOW,
            )

        # Then: the refusal names the tier and what was left
        assert exc_info.value.shortfalls == [
            {'tier_id': str(second.id), 'requested': 2, 'available': 0}
        ]
        # And: the first tier's seats came back and the transaction is gone
        assert self._available(first) == first.total_seats
        assert self.store.transactions == {}
        assert self.store.events[self.event.id].available_seats == 15

    @pytest.mark.asyncio
    async def test_failed_compensation_surfaces_as_storage_failure(self):
        first, second = sorted([self.vip, self.regular], key=lambda t: t.id)

        def drain(tier_id):
            if tier_id == second.id:
                self.store.tiers[second.id].available_seats = 0

        self.store.before_reserve = drain
        self.store.fail_delete = True

        with pytest.raises(StorageFailureError):
            await self.use_case.execute(
                event_id=self.event.id,
                user_id=self.buyer,
                lines=[CartLine(first.id, 1), CartLine(second.id, 1)],
                now=NOW,
            )

        # Compensation unit rolled back as a whole: left for reconciliation
        assert len(self.store.transactions) == 1
        assert self._available(first) == first.total_seats - 1

    @pytest.mark.asyncio
    async def test_concurrent_buyers_never_oversell(self):
        # Given: 12 buyers race for the 5 VIP seats
        use_cases = [self._use_case() for _ in range(12)]

        results = await asyncio.gather(
            *[
                use_case.execute(
                    event_id=self.event.id,
                    user_id=uuid.uuid4(),
                    lines=[CartLine(self.vip.id, 1)],
                    now=NOW,
                )
                for use_case in use_cases
            ],
            return_exceptions=True,
        )

        succeeded = [r for r in results if not isinstance(r, Exception)]
        refused = [r for r in results if isinstance(r, InsufficientStockError)]
        assert len(succeeded) == 5
        assert len(refused) == 7
        assert self._available(self.vip) == 0
        assert self._event_available() == 10
        assert len(self.store.transactions) == 5


def _checkout_count(result: str) -> float:
    return (
        REGISTRY.get_sample_value('marketplace_checkout_requests_total', {'result': result})
        or 0.0
    )


def _compensation_count() -> float:
    return REGISTRY.get_sample_value('marketplace_checkout_compensations_total') or 0.0


class TestCheckoutMetrics(CheckoutFixture):
    async def _counted(self, result: str, exc_type, **kwargs) -> float:
        before = _checkout_count(result)
        with pytest.raises(exc_type):
            await self.use_case.execute(event_id=self.event.id, user_id=self.buyer, **kwargs)
        return _checkout_count(result) - before

    @pytest.mark.asyncio
    async def test_validation_failure_is_counted(self):
        assert await self._counted('validation_error', ValidationError, lines=[]) == 1

    @pytest.mark.asyncio
    async def test_unknown_event_is_counted(self):
        before = _checkout_count('not_found')

        with pytest.raises(NotFoundError):
            await self.use_case.execute(
                event_id=uuid.uuid4(), user_id=self.buyer, lines=[CartLine(self.vip.id, 1)]
            )

        assert _checkout_count('not_found') - before == 1

    @pytest.mark.asyncio
    async def test_unknown_voucher_is_counted(self):
        counted = await self._counted(
            'promotion_not_found',
            PromotionNotFoundError,
            lines=[CartLine(self.vip.id, 1)],
            voucher_code='NOPE',
            now=NOW,
        )

        assert counted == 1

    @pytest.mark.asyncio
    async def test_compensated_refusal_is_counted_once(self):
        # Given: the second tier drains between pre-check and reservation
        first, second = sorted([self.vip, self.regular], key=lambda t: t.id)

        def drain(tier_id):
            if tier_id == second.id:
                self.store.tiers[second.id].available_seats = 0

        self.store.before_reserve = drain
        compensations_before = _compensation_count()
        totals_before = {
            result: _checkout_count(result)
            for result in ('insufficient_stock', 'created', 'error', 'storage_failure')
        }

        # When
        counted = await self._counted(
            'insufficient_stock',
            InsufficientStockError,
            lines=[CartLine(first.id, 1), CartLine(second.id, 1)],
            now=NOW,
        )

        # Then: one request outcome, one compensation
        assert counted == 1
        assert _compensation_count() - compensations_before == 1
        for result in ('created', 'error', 'storage_failure'):
            assert _checkout_count(result) == totals_before[result]
