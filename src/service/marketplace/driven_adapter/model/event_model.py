from datetime import date, datetime, time
from typing import List, Optional
import uuid

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class EventModel(Base):
    __tablename__ = 'event'
    __table_args__ = (
        CheckConstraint(
            'available_seats >= 0 AND available_seats <= capacity',
            name='ck_event_available_within_capacity',
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    organizer_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default='')
    country: Mapped[str] = mapped_column(String(100), nullable=False, default='')
    state: Mapped[str] = mapped_column(String(100), nullable=False, default='')
    city: Mapped[str] = mapped_column(String(100), nullable=False, default='')
    venue: Mapped[str] = mapped_column(String(255), nullable=False, default='')
    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    time_start: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    time_end: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    available_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    tiers: Mapped[List['TicketTierModel']] = relationship(
        'TicketTierModel',
        back_populates='event',
        lazy='selectin',
        order_by='TicketTierModel.unit_price',
    )


class TicketTierModel(Base):
    __tablename__ = 'ticket_tier'
    __table_args__ = (
        UniqueConstraint('event_id', 'name', name='uq_ticket_tier_event_name'),
        CheckConstraint(
            'available_seats >= 0 AND available_seats <= total_seats',
            name='ck_ticket_tier_available_within_total',
        ),
        CheckConstraint('unit_price >= 0', name='ck_ticket_tier_price_non_negative'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey('event.id', ondelete='CASCADE'), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    unit_price: Mapped[int] = mapped_column(Integer, nullable=False)
    total_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    available_seats: Mapped[int] = mapped_column(Integer, nullable=False)

    event: Mapped['EventModel'] = relationship('EventModel', back_populates='tiers')
