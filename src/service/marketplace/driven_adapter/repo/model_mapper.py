"""Row → entity conversion shared by the marketplace repositories."""

from datetime import datetime, timezone
from typing import Optional

from src.service.marketplace.domain.entity.event_entity import Event, TicketTier
from src.service.marketplace.domain.entity.promotion_entity import (
    DiscountType,
    Promotion,
    PromotionStatus,
)
from src.service.marketplace.domain.entity.transaction_entity import (
    Transaction,
    TransactionItem,
    TransactionStatus,
)
from src.service.marketplace.driven_adapter.model.event_model import EventModel, TicketTierModel
from src.service.marketplace.driven_adapter.model.promotion_model import PromotionModel
from src.service.marketplace.driven_adapter.model.transaction_model import (
    TransactionItemModel,
    TransactionModel,
)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def to_tier_entity(db_tier: TicketTierModel) -> TicketTier:
    return TicketTier(
        id=db_tier.id,
        event_id=db_tier.event_id,
        name=db_tier.name,
        unit_price=db_tier.unit_price,
        total_seats=db_tier.total_seats,
        available_seats=db_tier.available_seats,
    )


def to_event_entity(db_event: EventModel, *, with_tiers: bool = True) -> Event:
    return Event(
        id=db_event.id,
        organizer_id=db_event.organizer_id,
        title=db_event.title,
        description=db_event.description,
        country=db_event.country,
        state=db_event.state,
        city=db_event.city,
        venue=db_event.venue,
        start_date=db_event.start_date,
        end_date=db_event.end_date,
        time_start=db_event.time_start,
        time_end=db_event.time_end,
        price=db_event.price,
        image_url=db_event.image_url,
        capacity=db_event.capacity,
        available_seats=db_event.available_seats,
        tiers=[to_tier_entity(t) for t in db_event.tiers] if with_tiers else [],
        created_at=as_utc(db_event.created_at),
    )


def to_item_entity(db_item: TransactionItemModel) -> TransactionItem:
    return TransactionItem(
        id=db_item.id,
        transaction_id=db_item.transaction_id,
        ticket_tier_id=db_item.ticket_tier_id,
        quantity=db_item.quantity,
        unit_price=db_item.unit_price,
        created_at=as_utc(db_item.created_at),
    )


def to_transaction_entity(
    db_transaction: TransactionModel, *, items: Optional[list[TransactionItemModel]] = None
) -> Transaction:
    return Transaction(
        id=db_transaction.id,
        event_id=db_transaction.event_id,
        user_id=db_transaction.user_id,
        status=TransactionStatus(db_transaction.status),
        voucher_code=db_transaction.voucher_code,
        subtotal_amount=db_transaction.subtotal_amount,
        discount_amount=db_transaction.discount_amount,
        paid_amount=db_transaction.paid_amount,
        proof_url=db_transaction.proof_url,
        items=[to_item_entity(i) for i in (items or [])],
        created_at=as_utc(db_transaction.created_at),
        updated_at=as_utc(db_transaction.updated_at),
    )


def to_promotion_entity(db_promotion: PromotionModel) -> Promotion:
    return Promotion(
        id=db_promotion.id,
        event_id=db_promotion.event_id,
        code=db_promotion.code,
        discount_type=DiscountType(db_promotion.discount_type),
        discount_value=db_promotion.discount_value,
        start_date=db_promotion.start_date,
        end_date=db_promotion.end_date,
        status=PromotionStatus(db_promotion.status),
    )
