from datetime import datetime
from typing import List, Optional
import uuid

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.platform.database.orm_db_setting import Base


class TransactionModel(Base):
    __tablename__ = 'ticket_transaction'
    __table_args__ = (
        CheckConstraint('paid_amount >= 0', name='ck_ticket_transaction_paid_non_negative'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey('event.id'), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    voucher_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    subtotal_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    paid_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    proof_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    # Set by the application clock so the sweeper and the deadline check agree
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    items: Mapped[List['TransactionItemModel']] = relationship(
        'TransactionItemModel',
        lazy='selectin',
        order_by='TransactionItemModel.id',
        viewonly=True,
    )


class TransactionItemModel(Base):
    __tablename__ = 'ticket_transaction_item'
    __table_args__ = (CheckConstraint('quantity > 0', name='ck_transaction_item_quantity_positive'),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    transaction_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey('ticket_transaction.id'), nullable=False, index=True
    )
    ticket_tier_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey('ticket_tier.id'), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
