from typing import Iterable, List
import uuid

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import (
    StorageFailureError,
    UnknownTierError,
    ValidationError,
)
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_ticket_tier_ledger import ITicketTierLedger
from src.service.marketplace.domain.entity.event_entity import TicketTier
from src.service.marketplace.domain.value_object.cart import ReservationOutcome
from src.service.marketplace.domain.value_object.lifecycle_result import TierDrift
from src.service.marketplace.driven_adapter.model.event_model import TicketTierModel
from src.service.marketplace.driven_adapter.repo.model_mapper import to_tier_entity


def _ensure_positive(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError(f'Seat quantity must be a positive integer, got {quantity!r}')


class TicketTierLedgerImpl(ITicketTierLedger):
    """UoW-bound: every statement runs in the session of the enclosing unit of work."""

    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def reserve(self, *, tier_id: uuid.UUID, quantity: int) -> ReservationOutcome:
        _ensure_positive(quantity)
        result = await self.session.execute(
            update(TicketTierModel)
            .where(
                TicketTierModel.id == tier_id,
                TicketTierModel.available_seats >= quantity,
            )
            .values(available_seats=TicketTierModel.available_seats - quantity)
            .returning(TicketTierModel.available_seats)
            .execution_options(synchronize_session=False)
        )
        remaining = result.scalar_one_or_none()
        if remaining is not None:
            return ReservationOutcome(
                tier_id=tier_id,
                requested=quantity,
                available=remaining + quantity,
                reserved=True,
                remaining=remaining,
            )

        available = await self.session.scalar(
            select(TicketTierModel.available_seats).where(TicketTierModel.id == tier_id)
        )
        if available is None:
            raise UnknownTierError([tier_id])
        return ReservationOutcome(
            tier_id=tier_id, requested=quantity, available=available, reserved=False
        )

    @Logger.io
    async def release(self, *, tier_id: uuid.UUID, quantity: int) -> int:
        _ensure_positive(quantity)
        result = await self.session.execute(
            update(TicketTierModel)
            .where(
                TicketTierModel.id == tier_id,
                TicketTierModel.available_seats + quantity <= TicketTierModel.total_seats,
            )
            .values(available_seats=TicketTierModel.available_seats + quantity)
            .returning(TicketTierModel.available_seats)
            .execution_options(synchronize_session=False)
        )
        available = result.scalar_one_or_none()
        if available is None:
            raise StorageFailureError(
                f'Ledger refused to release {quantity} seat(s) on tier {tier_id}: '
                'release would exceed total seats or tier is missing'
            )
        return available

    @Logger.io
    async def get_tiers(self, *, event_id: uuid.UUID) -> List[TicketTier]:
        result = await self.session.execute(
            select(TicketTierModel)
            .where(TicketTierModel.event_id == event_id)
            .order_by(TicketTierModel.unit_price, TicketTierModel.id)
            .execution_options(populate_existing=True)
        )
        return [to_tier_entity(row) for row in result.scalars().all()]

    @Logger.io
    async def get_tiers_by_ids(self, *, tier_ids: Iterable[uuid.UUID]) -> List[TicketTier]:
        ids = list(tier_ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(TicketTierModel)
            .where(TicketTierModel.id.in_(ids))
            .execution_options(populate_existing=True)
        )
        return [to_tier_entity(row) for row in result.scalars().all()]

    @Logger.io
    async def reset_from_holdings(self, *, tier_id: uuid.UUID, held_quantity: int) -> TierDrift:
        before = await self.session.scalar(
            select(TicketTierModel.available_seats).where(TicketTierModel.id == tier_id)
        )
        if before is None:
            raise UnknownTierError([tier_id])
        result = await self.session.execute(
            update(TicketTierModel)
            .where(
                TicketTierModel.id == tier_id,
                TicketTierModel.total_seats >= held_quantity,
            )
            .values(available_seats=TicketTierModel.total_seats - held_quantity)
            .returning(TicketTierModel.available_seats)
            .execution_options(synchronize_session=False)
        )
        after = result.scalar_one_or_none()
        if after is None:
            raise StorageFailureError(
                f'Tier {tier_id} has {held_quantity} seat(s) held, more than its total seats'
            )
        return TierDrift(tier_id=tier_id, available_before=before, available_after=after)
