"""
Unit tests for the transaction lifecycle commands

Test Coverage:
1. Payment proof: owner only, deadline, url validation, replacement
2. Admin decisions: role check, unknown and non-admin targets, seat release
3. Rejection then resubmission re-acquires seats (or stays rejected)
4. Owner cancel releases seats exactly once
5. Lost compare-and-set retries without touching seats
"""

from datetime import timedelta
import uuid

import pytest

from src.platform.exception.exceptions import (
    ForbiddenError,
    InsufficientStockError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)
from src.service.marketplace.app.command.admin_set_transaction_status_use_case import (
    AdminSetTransactionStatusUseCase,
)
from src.service.marketplace.app.command.cancel_transaction_use_case import (
    CancelTransactionUseCase,
)
from src.service.marketplace.app.command.submit_payment_proof_use_case import (
    SubmitPaymentProofUseCase,
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
PROOF_URL = 'https://cdn.example.com/transaction-proofs/receipt.jpg'


class LifecycleFixture:
    def setup_method(self):
        self.store = InMemoryStore()
        self.event = self.store.add_event(tiers=[TierSpec('Regular', 500, 10)])
        self.tier = self.event.tiers[0]
        self.buyer = uuid.uuid4()
        self.policy = TransactionLifecyclePolicy(rejection_releases_seats=True)
        self.uow = FakeUnitOfWork(self.store)

    def _seed(self, status=TransactionStatus.AWAITING_PAYMENT, quantity=3, holds_seats=True):
        return self.store.add_transaction(
            event=self.event,
            quantities={self.tier.id: quantity},
            user_id=self.buyer,
            created_at=T0,
            status=status,
            holds_seats=holds_seats,
        )

    def _available(self) -> int:
        return self.store.tiers[self.tier.id].available_seats

    def _event_available(self) -> int:
        return self.store.events[self.event.id].available_seats

    def _status(self, transaction_id):
        return self.store.transactions[transaction_id].status

    def _submit_proof(self, prefix='https://cdn.example.com/transaction-proofs/'):
        return SubmitPaymentProofUseCase(
            uow=self.uow,
            policy=self.policy,
            payment_deadline=timedelta(hours=2),
            proof_url_prefix=prefix,
        )

    def _admin(self):
        return AdminSetTransactionStatusUseCase(uow=self.uow, policy=self.policy)


class TestSubmitPaymentProof(LifecycleFixture):
    @pytest.mark.asyncio
    async def test_owner_submits_proof(self):
        # Given
        transaction = self._seed()

        # When
        updated = await self._submit_proof().execute(
            transaction_id=transaction.id,
            user_id=self.buyer,
            proof_url=PROOF_URL,
            now=T0 + timedelta(minutes=30),
        )

        # Then
        assert updated.status == TransactionStatus.AWAITING_CONFIRMATION
        assert updated.proof_url == PROOF_URL
        assert len(updated.items) == 1
        assert self._available() == 7

    @pytest.mark.asyncio
    async def test_second_upload_replaces_url(self):
        transaction = self._seed(status=TransactionStatus.AWAITING_CONFIRMATION)
        new_url = PROOF_URL.replace('receipt', 'receipt-2')

        updated = await self._submit_proof().execute(
            transaction_id=transaction.id,
            user_id=self.buyer,
            proof_url=new_url,
            now=T0 + timedelta(minutes=45),
        )

        assert updated.status == TransactionStatus.AWAITING_CONFIRMATION
        assert self.store.transactions[transaction.id].proof_url == new_url
        assert self._available() == 7

    @pytest.mark.asyncio
    async def test_someone_else_cannot_submit(self):
        transaction = self._seed()

        with pytest.raises(ForbiddenError):
            await self._submit_proof().execute(
                transaction_id=transaction.id,
                user_id=uuid.uuid4(),
                proof_url=PROOF_URL,
                now=T0 + timedelta(minutes=5),
            )

        assert self._status(transaction.id) == TransactionStatus.AWAITING_PAYMENT

    @pytest.mark.asyncio
    async def test_proof_after_deadline_is_refused_before_sweeper_runs(self):
        transaction = self._seed()

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            await self._submit_proof().execute(
                transaction_id=transaction.id,
                user_id=self.buyer,
                proof_url=PROOF_URL,
                now=T0 + timedelta(hours=2),
            )

        assert exc_info.value.current_status == 'awaiting_payment'
        assert self._status(transaction.id) == TransactionStatus.AWAITING_PAYMENT

    @pytest.mark.parametrize('proof_url', ['', '   ', 'https://evil.example.com/x.jpg'])
    @pytest.mark.asyncio
    async def test_invalid_proof_url(self, proof_url):
        transaction = self._seed()

        with pytest.raises(ValidationError):
            await self._submit_proof().execute(
                transaction_id=transaction.id,
                user_id=self.buyer,
                proof_url=proof_url,
                now=T0 + timedelta(minutes=5),
            )

    @pytest.mark.asyncio
    async def test_any_url_accepted_without_prefix(self):
        transaction = self._seed()

        updated = await self._submit_proof(prefix='').execute(
            transaction_id=transaction.id,
            user_id=self.buyer,
            proof_url='https://elsewhere.example.com/proof.png',
            now=T0 + timedelta(minutes=5),
        )

        assert updated.status == TransactionStatus.AWAITING_CONFIRMATION

    @pytest.mark.asyncio
    async def test_proof_on_done_transaction(self):
        transaction = self._seed(status=TransactionStatus.DONE)

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            await self._submit_proof().execute(
                transaction_id=transaction.id,
                user_id=self.buyer,
                proof_url=PROOF_URL,
                now=T0 + timedelta(minutes=5),
            )

        assert exc_info.value.details == {'current_status': 'done'}

    @pytest.mark.asyncio
    async def test_unknown_transaction(self):
        with pytest.raises(NotFoundError):
            await self._submit_proof().execute(
                transaction_id=uuid.uuid4(), user_id=self.buyer, proof_url=PROOF_URL, now=T0
            )


class TestAdminSetTransactionStatus(LifecycleFixture):
    @pytest.mark.asyncio
    async def test_confirm_keeps_seats(self):
        transaction = self._seed(status=TransactionStatus.AWAITING_CONFIRMATION)

        updated = await self._admin().execute(
            transaction_id=transaction.id, target_status='done', caller_role=UserRole.ADMIN, now=T0
        )

        assert updated.status == TransactionStatus.DONE
        assert self._available() == 7

    @pytest.mark.asyncio
    async def test_non_admin_is_forbidden(self):
        transaction = self._seed(status=TransactionStatus.AWAITING_CONFIRMATION)

        with pytest.raises(ForbiddenError):
            await self._admin().execute(
                transaction_id=transaction.id, target_status='done', caller_role=UserRole.CUSTOMER
            )

        assert self._status(transaction.id) == TransactionStatus.AWAITING_CONFIRMATION

    @pytest.mark.asyncio
    async def test_unknown_status(self):
        transaction = self._seed(status=TransactionStatus.AWAITING_CONFIRMATION)

        with pytest.raises(ValidationError):
            await self._admin().execute(
                transaction_id=transaction.id, target_status='paid', caller_role=UserRole.ADMIN
            )

    @pytest.mark.parametrize('target', ['expired', 'awaiting_payment', 'awaiting_confirmation'])
    @pytest.mark.asyncio
    async def test_targets_admins_cannot_set(self, target):
        transaction = self._seed(status=TransactionStatus.AWAITING_CONFIRMATION)

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            await self._admin().execute(
                transaction_id=transaction.id, target_status=target, caller_role=UserRole.ADMIN
            )

        assert exc_info.value.current_status == 'awaiting_confirmation'
        assert self._available() == 7

    @pytest.mark.asyncio
    async def test_confirm_requires_proof_first(self):
        transaction = self._seed(status=TransactionStatus.AWAITING_PAYMENT)

        with pytest.raises(InvalidStateTransitionError):
            await self._admin().execute(
                transaction_id=transaction.id, target_status='done', caller_role=UserRole.ADMIN
            )

    @pytest.mark.asyncio
    async def test_admin_cancel_of_done_releases_seats(self):
        transaction = self._seed(status=TransactionStatus.DONE)

        updated = await self._admin().execute(
            transaction_id=transaction.id, target_status='canceled', caller_role=UserRole.ADMIN
        )

        assert updated.status == TransactionStatus.CANCELED
        assert self._available() == 10
        assert self._event_available() == 10


class TestRejectAndResubmit(LifecycleFixture):
    @pytest.mark.asyncio
    async def test_reject_releases_and_resubmit_reacquires(self):
        # Given
        transaction = self._seed(status=TransactionStatus.AWAITING_CONFIRMATION)

        # When: rejected
        await self._admin().execute(
            transaction_id=transaction.id, target_status='rejected', caller_role=UserRole.ADMIN
        )

        # Then: seats are back on sale
        assert self._status(transaction.id) == TransactionStatus.REJECTED
        assert self._available() == 10
        assert self._event_available() == 10

        # When: buyer uploads a corrected proof
        updated = await self._submit_proof().execute(
            transaction_id=transaction.id,
            user_id=self.buyer,
            proof_url=PROOF_URL,
            now=T0 + timedelta(minutes=50),
        )

        # Then: seats are held again
        assert updated.status == TransactionStatus.AWAITING_CONFIRMATION
        assert self._available() == 7
        assert self._event_available() == 7

    @pytest.mark.asyncio
    async def test_resubmit_without_stock_stays_rejected(self):
        # Given: rejected, then another buyer takes 9 of the 10 seats
        transaction = self._seed(status=TransactionStatus.REJECTED, holds_seats=False)
        self._seed(quantity=9)

        # When
        with pytest.raises(InsufficientStockError) as exc_info:
            await self._submit_proof().execute(
                transaction_id=transaction.id,
                user_id=self.buyer,
                proof_url=PROOF_URL,
                now=T0 + timedelta(minutes=10),
            )

        # Then
        assert exc_info.value.shortfalls == [
            {'tier_id': str(self.tier.id), 'requested': 3, 'available': 1}
        ]
        assert self._status(transaction.id) == TransactionStatus.REJECTED
        assert self._available() == 1
        assert self._event_available() == 1

    @pytest.mark.asyncio
    async def test_rejection_keeps_seats_when_configured(self):
        self.policy = TransactionLifecyclePolicy(rejection_releases_seats=False)
        transaction = self._seed(status=TransactionStatus.AWAITING_CONFIRMATION)

        await self._admin().execute(
            transaction_id=transaction.id, target_status='rejected', caller_role=UserRole.ADMIN
        )
        assert self._available() == 7

        await self._submit_proof().execute(
            transaction_id=transaction.id,
            user_id=self.buyer,
            proof_url=PROOF_URL,
            now=T0 + timedelta(minutes=10),
        )
        assert self._available() == 7


class TestCancelTransaction(LifecycleFixture):
    @pytest.mark.asyncio
    async def test_owner_cancel_releases_seats_once(self):
        transaction = self._seed()
        use_case = CancelTransactionUseCase(uow=self.uow, policy=self.policy)

        updated = await use_case.execute(transaction_id=transaction.id, user_id=self.buyer, now=T0)
        assert updated.status == TransactionStatus.CANCELED
        assert self._available() == 10

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            await use_case.execute(transaction_id=transaction.id, user_id=self.buyer, now=T0)

        assert exc_info.value.current_status == 'canceled'
        assert self._available() == 10
        assert self._event_available() == 10

    @pytest.mark.asyncio
    async def test_owner_cannot_cancel_done(self):
        transaction = self._seed(status=TransactionStatus.DONE)
        use_case = CancelTransactionUseCase(uow=self.uow, policy=self.policy)

        with pytest.raises(InvalidStateTransitionError):
            await use_case.execute(transaction_id=transaction.id, user_id=self.buyer)

        assert self._available() == 7

    @pytest.mark.asyncio
    async def test_only_owner_can_cancel(self):
        transaction = self._seed()
        use_case = CancelTransactionUseCase(uow=self.uow, policy=self.policy)

        with pytest.raises(ForbiddenError):
            await use_case.execute(transaction_id=transaction.id, user_id=uuid.uuid4())

        assert self._available() == 7


class TestCompareAndSetRace(LifecycleFixture):
    @pytest.mark.asyncio
    async def test_lost_compare_and_set_is_retried(self):
        # Given: the first compare-and-set sees a concurrent writer
        transaction = self._seed()
        calls = []

        def concurrent_writer(transaction_id):
            calls.append(transaction_id)
            if len(calls) == 1:
                self.store.transactions[transaction_id].status = TransactionStatus.AWAITING_CONFIRMATION

        self.store.before_compare_and_set = concurrent_writer
        use_case = CancelTransactionUseCase(uow=self.uow, policy=self.policy)

        # When
        updated = await use_case.execute(transaction_id=transaction.id, user_id=self.buyer, now=T0)

        # Then: second attempt won and released exactly once
        assert len(calls) == 2
        assert updated.status == TransactionStatus.CANCELED
        assert self._available() == 10

    @pytest.mark.asyncio
    async def test_gives_up_after_repeated_losses(self):
        transaction = self._seed()

        def always_changed(transaction_id):
            self.store.transactions[transaction_id].status = TransactionStatus.CANCELED

        self.store.before_compare_and_set = always_changed
        use_case = CancelTransactionUseCase(uow=self.uow, policy=self.policy)

        with pytest.raises(InvalidStateTransitionError):
            await use_case.execute(transaction_id=transaction.id, user_id=self.buyer, now=T0)

        assert self._status(transaction.id) == TransactionStatus.AWAITING_PAYMENT
        assert self._available() == 7
