from datetime import datetime, timedelta, timezone
from enum import StrEnum
from typing import List, Optional
import uuid

import attrs

from src.platform.exception.exceptions import ValidationError
from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7 import new_uuid7


class TransactionStatus(StrEnum):
    AWAITING_PAYMENT = 'awaiting_payment'
    AWAITING_CONFIRMATION = 'awaiting_confirmation'
    DONE = 'done'
    REJECTED = 'rejected'
    EXPIRED = 'expired'
    CANCELED = 'canceled'


class TransactionTrigger(StrEnum):
    SUBMIT_PROOF = 'submit_proof'
    ADMIN_CONFIRM = 'admin_confirm'
    ADMIN_REJECT = 'admin_reject'
    ADMIN_CANCEL = 'admin_cancel'
    OWNER_CANCEL = 'owner_cancel'
    DEADLINE_ELAPSED = 'deadline_elapsed'


@attrs.frozen
class TransitionPlan:
    """
    Where a trigger may fire from, where it lands, and what it does to seats.

    releases_seats: the winning status flip returns every item's quantity to the ledger.
    reacquires_from: sources from which the flip must take the items' seats again.
    """

    trigger: TransactionTrigger
    sources: frozenset[TransactionStatus]
    target: TransactionStatus
    releases_seats: bool = False
    reacquires_from: frozenset[TransactionStatus] = frozenset()

    def allows(self, status: TransactionStatus) -> bool:
        return status in self.sources


@attrs.frozen
class TransactionLifecyclePolicy:
    """
    Transaction state machine.

    Whether ``rejected`` keeps its seats is a deployment choice
    (``REJECTION_RELEASES_SEATS``); every other edge is fixed.
    """

    rejection_releases_seats: bool = True

    @property
    def seat_holding_statuses(self) -> frozenset[TransactionStatus]:
        holding = {
            TransactionStatus.AWAITING_PAYMENT,
            TransactionStatus.AWAITING_CONFIRMATION,
            TransactionStatus.DONE,
        }
        if not self.rejection_releases_seats:
            holding.add(TransactionStatus.REJECTED)
        return frozenset(holding)

    @property
    def expirable_statuses(self) -> frozenset[TransactionStatus]:
        return self.seat_holding_statuses - {TransactionStatus.DONE}

    def holds_seats(self, status: TransactionStatus) -> bool:
        return status in self.seat_holding_statuses

    def plan(self, trigger: TransactionTrigger) -> TransitionPlan:
        if trigger == TransactionTrigger.SUBMIT_PROOF:
            return TransitionPlan(
                trigger=trigger,
                sources=frozenset(
                    {
                        TransactionStatus.AWAITING_PAYMENT,
                        TransactionStatus.AWAITING_CONFIRMATION,
                        TransactionStatus.REJECTED,
                    }
                ),
                target=TransactionStatus.AWAITING_CONFIRMATION,
                reacquires_from=(
                    frozenset({TransactionStatus.REJECTED})
                    if self.rejection_releases_seats
                    else frozenset()
                ),
            )
        if trigger == TransactionTrigger.ADMIN_CONFIRM:
            return TransitionPlan(
                trigger=trigger,
                sources=frozenset({TransactionStatus.AWAITING_CONFIRMATION}),
                target=TransactionStatus.DONE,
            )
        if trigger == TransactionTrigger.ADMIN_REJECT:
            return TransitionPlan(
                trigger=trigger,
                sources=frozenset({TransactionStatus.AWAITING_CONFIRMATION}),
                target=TransactionStatus.REJECTED,
                releases_seats=self.rejection_releases_seats,
            )
        if trigger == TransactionTrigger.ADMIN_CANCEL:
            return TransitionPlan(
                trigger=trigger,
                sources=self.seat_holding_statuses,
                target=TransactionStatus.CANCELED,
                releases_seats=True,
            )
        if trigger == TransactionTrigger.OWNER_CANCEL:
            return TransitionPlan(
                trigger=trigger,
                sources=self.expirable_statuses,
                target=TransactionStatus.CANCELED,
                releases_seats=True,
            )
        if trigger == TransactionTrigger.DEADLINE_ELAPSED:
            return TransitionPlan(
                trigger=trigger,
                sources=self.expirable_statuses,
                target=TransactionStatus.EXPIRED,
                releases_seats=True,
            )
        raise ValueError(f'Unknown transaction trigger: {trigger}')

    @staticmethod
    def admin_trigger_for(target: TransactionStatus) -> TransactionTrigger | None:
        return {
            TransactionStatus.DONE: TransactionTrigger.ADMIN_CONFIRM,
            TransactionStatus.REJECTED: TransactionTrigger.ADMIN_REJECT,
            TransactionStatus.CANCELED: TransactionTrigger.ADMIN_CANCEL,
        }.get(target)


@attrs.define
class TransactionItem:
    id: uuid.UUID
    transaction_id: uuid.UUID
    ticket_tier_id: uuid.UUID
    quantity: int
    unit_price: int
    created_at: Optional[datetime] = None

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


@attrs.define
class Transaction:
    id: uuid.UUID
    event_id: uuid.UUID
    user_id: uuid.UUID
    subtotal_amount: int
    discount_amount: int
    paid_amount: int
    status: TransactionStatus = TransactionStatus.AWAITING_PAYMENT
    voucher_code: Optional[str] = None
    proof_url: Optional[str] = None
    items: List[TransactionItem] = attrs.field(factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        id: uuid.UUID,
        event_id: uuid.UUID,
        user_id: uuid.UUID,
        lines: List[tuple[uuid.UUID, int, int]],
        discount_amount: int = 0,
        voucher_code: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> 'Transaction':
        """
        Build a new awaiting_payment transaction.

        Args:
            lines: (ticket_tier_id, quantity, unit_price) per aggregated tier

        paid_amount is derived here once and never recomputed afterwards.
        """
        if not lines:
            raise ValidationError('Transaction needs at least one item')
        if discount_amount < 0:
            raise ValidationError('Discount cannot be negative')

        created_at = now or datetime.now(timezone.utc)
        items = [
            TransactionItem(
                id=new_uuid7(),
                transaction_id=id,
                ticket_tier_id=tier_id,
                quantity=quantity,
                unit_price=unit_price,
                created_at=created_at,
            )
            for tier_id, quantity, unit_price in lines
        ]
        subtotal = sum(item.line_total for item in items)
        discount = min(discount_amount, subtotal)
        return cls(
            id=id,
            event_id=event_id,
            user_id=user_id,
            subtotal_amount=subtotal,
            discount_amount=discount,
            paid_amount=subtotal - discount,
            voucher_code=voucher_code,
            status=TransactionStatus.AWAITING_PAYMENT,
            items=items,
            created_at=created_at,
            updated_at=created_at,
        )

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    def quantities_by_tier(self) -> dict[uuid.UUID, int]:
        quantities: dict[uuid.UUID, int] = {}
        for item in self.items:
            quantities[item.ticket_tier_id] = quantities.get(item.ticket_tier_id, 0) + item.quantity
        return quantities

    def payment_deadline(self, window: timedelta) -> datetime:
        created_at = self.created_at or datetime.now(timezone.utc)
        return created_at + window

    def is_past_deadline(self, *, now: datetime, window: timedelta) -> bool:
        return now >= self.payment_deadline(window)

    def is_owned_by(self, user_id: uuid.UUID) -> bool:
        return self.user_id == user_id

    def with_status(
        self, status: TransactionStatus, *, now: datetime, proof_url: Optional[str] = None
    ) -> 'Transaction':
        return attrs.evolve(
            self,
            status=status,
            proof_url=proof_url if proof_url is not None else self.proof_url,
            updated_at=now,
        )
