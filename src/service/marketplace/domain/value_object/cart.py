from typing import Iterable, Optional
import uuid

import attrs

from src.platform.exception.exceptions import ValidationError


@attrs.frozen
class CartLine:
    ticket_tier_id: uuid.UUID
    quantity: int


@attrs.frozen
class ReservationOutcome:
    """
    Result of one conditional decrement on a tier.

    A refusal is an ordinary outcome carrying what was asked for and what was
    left at the moment of the attempt.
    """

    tier_id: uuid.UUID
    requested: int
    available: int
    reserved: bool
    remaining: Optional[int] = None

    def as_shortfall(self) -> dict:
        return {
            'tier_id': str(self.tier_id),
            'requested': self.requested,
            'available': self.available,
        }


def aggregate_cart(lines: Iterable[CartLine]) -> dict[uuid.UUID, int]:
    """
    Merge duplicate tier ids, keeping first-seen order.

    Raises ValidationError for an empty cart or any non-positive quantity.
    """
    quantities: dict[uuid.UUID, int] = {}
    errors = []
    for index, line in enumerate(lines):
        if isinstance(line.quantity, bool) or not isinstance(line.quantity, int):
            errors.append({'field': f'items.{index}.quantity', 'message': 'must be an integer'})
            continue
        if line.quantity <= 0:
            errors.append({'field': f'items.{index}.quantity', 'message': 'must be positive'})
            continue
        quantities[line.ticket_tier_id] = quantities.get(line.ticket_tier_id, 0) + line.quantity

    if errors:
        raise ValidationError('Invalid cart items', details=errors)
    if not quantities:
        raise ValidationError('Cart is empty', details=[{'field': 'items', 'message': 'empty'}])
    return quantities
