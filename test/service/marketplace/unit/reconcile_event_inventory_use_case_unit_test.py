"""
Unit tests for ReconcileEventInventoryUseCase

Test Coverage:
1. Counters rebuilt from seat-holding transactions after drift
2. Consistent counters are reported as not repaired
3. Admin only, unknown event
"""

from datetime import timedelta
import uuid

import pytest

from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.service.marketplace.app.command.reconcile_event_inventory_use_case import (
    ReconcileEventInventoryUseCase,
)
from src.service.marketplace.domain.entity.event_entity import TierSpec
from src.service.marketplace.domain.entity.transaction_entity import (
    TransactionLifecyclePolicy,
    TransactionStatus,
)
from src.service.marketplace.domain.entity.user_entity import UserRole
from test.service.marketplace.fakes import FakeUnitOfWork, InMemoryStore, utc


pytestmark = pytest.mark.unit

T0 = utc(2026, 10, 17, 9, 0)


class TestReconcileEventInventory:
    def setup_method(self):
        self.store = InMemoryStore()
        self.event = self.store.add_event(
            tiers=[TierSpec('VIP', 1500, 5), TierSpec('Regular', 500, 10)]
        )
        self.vip, self.regular = sorted(self.event.tiers, key=lambda t: t.name != 'VIP')
        self.use_case = ReconcileEventInventoryUseCase(
            uow=FakeUnitOfWork(self.store), policy=TransactionLifecyclePolicy()
        )

    def _seed(self, status, vip, regular):
        return self.store.add_transaction(
            event=self.event,
            quantities={self.vip.id: vip, self.regular.id: regular},
            user_id=uuid.uuid4(),
            created_at=T0 + timedelta(minutes=len(self.store.transactions)),
            status=status,
        )

    @pytest.mark.asyncio
    async def test_repairs_drift_left_by_crashed_checkout(self):
        # Given: holds of 2 VIP and 4 Regular, plus a canceled row that holds nothing
        self._seed(TransactionStatus.AWAITING_PAYMENT, vip=1, regular=1)
        self._seed(TransactionStatus.DONE, vip=1, regular=3)
        self.store.add_transaction(
            event=self.event,
            quantities={self.regular.id: 2},
            user_id=uuid.uuid4(),
            created_at=T0,
            status=TransactionStatus.CANCELED,
            holds_seats=False,
        )
        # And: a crash left the VIP tier decremented without a transaction
        self.store.tiers[self.vip.id].available_seats -= 1

        # When
        report = await self.use_case.execute(event_id=self.event.id)

        # Then
        assert report.repaired
        assert report.event_available_before == 9
        assert report.event_available_after == 9
        assert self.store.tiers[self.vip.id].available_seats == 3
        assert self.store.tiers[self.regular.id].available_seats == 6
        assert self.store.events[self.event.id].available_seats == 9
        vip_drift = next(d for d in report.tiers if d.tier_id == self.vip.id)
        assert (vip_drift.available_before, vip_drift.available_after) == (2, 3)

    @pytest.mark.asyncio
    async def test_event_aggregate_drift_is_repaired(self):
        self._seed(TransactionStatus.AWAITING_CONFIRMATION, vip=2, regular=0)
        self.store.events[self.event.id].available_seats = 15

        report = await self.use_case.execute(event_id=self.event.id)

        assert report.repaired
        assert (report.event_available_before, report.event_available_after) == (15, 13)
        assert all(d.drift == 0 for d in report.tiers)

    @pytest.mark.asyncio
    async def test_consistent_counters_are_left_alone(self):
        self._seed(TransactionStatus.AWAITING_PAYMENT, vip=1, regular=1)

        report = await self.use_case.execute(event_id=self.event.id)

        assert not report.repaired
        assert self.store.events[self.event.id].available_seats == 13

    @pytest.mark.asyncio
    async def test_admin_only(self):
        with pytest.raises(ForbiddenError):
            await self.use_case.execute(
                event_id=self.event.id, caller_role=UserRole.EVENT_ORGANIZER
            )

    @pytest.mark.asyncio
    async def test_unknown_event(self):
        with pytest.raises(NotFoundError):
            await self.use_case.execute(event_id=uuid.uuid4())
