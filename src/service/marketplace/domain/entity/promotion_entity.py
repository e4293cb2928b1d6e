from datetime import date, datetime, time
from enum import StrEnum
import uuid

import attrs

from src.platform.exception.exceptions import PromotionExpiredError, PromotionInactiveError


class DiscountType(StrEnum):
    PERCENT = 'percent'
    NOMINAL = 'nominal'


class PromotionStatus(StrEnum):
    ACTIVE = 'active'
    INACTIVE = 'inactive'


def normalize_voucher_code(code: str) -> str:
    return code.strip().upper()


@attrs.define
class Promotion:
    id: uuid.UUID
    event_id: uuid.UUID
    code: str
    discount_type: DiscountType
    discount_value: int
    start_date: date
    end_date: date
    status: PromotionStatus = PromotionStatus.ACTIVE

    def ensure_redeemable(self, *, local_now: datetime) -> None:
        """
        Raise unless the promotion is active and ``local_now`` lies within
        [start_date 00:00:00, end_date 23:59:59] of the organizer's calendar.
        """
        if self.status != PromotionStatus.ACTIVE:
            raise PromotionInactiveError(f'Voucher {self.code} is not active')
        naive_now = local_now.replace(tzinfo=None)
        window_start = datetime.combine(self.start_date, time.min)
        window_end = datetime.combine(self.end_date, time(23, 59, 59))
        if naive_now < window_start or naive_now > window_end:
            raise PromotionExpiredError(f'Voucher {self.code} is not valid at this time')

    def discount_for(self, subtotal: int) -> int:
        """Discount in minor units, never more than the subtotal."""
        if self.discount_type == DiscountType.PERCENT:
            # round half up on integers
            discount = (subtotal * self.discount_value + 50) // 100
        else:
            discount = self.discount_value
        return max(0, min(discount, subtotal))
