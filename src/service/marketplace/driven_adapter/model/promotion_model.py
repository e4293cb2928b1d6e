from datetime import date
import uuid

from sqlalchemy import Date, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class PromotionModel(Base):
    __tablename__ = 'promotion'
    __table_args__ = (UniqueConstraint('event_id', 'code', name='uq_promotion_event_code'),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey('event.id'), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(String(64), nullable=False)  # stored upper-case
    discount_type: Mapped[str] = mapped_column(String(16), nullable=False)
    discount_value: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default='active')
