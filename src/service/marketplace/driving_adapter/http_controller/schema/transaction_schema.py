from datetime import datetime
from typing import List, Optional
import uuid

from pydantic import BaseModel, Field


class CartItemRequest(BaseModel):
    ticket_tier_id: uuid.UUID
    quantity: int


class CheckoutRequest(BaseModel):
    event_id: uuid.UUID
    items: List[CartItemRequest]
    voucher_code: Optional[str] = None

    class Config:
        json_schema_extra = {
            'example': {
                'event_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'items': [
                    {'ticket_tier_id': '01936d8f-5e74-7000-8000-000000000001', 'quantity': 2}
                ],
                'voucher_code': 'EARLYBIRD',
            }
        }


class ProofSubmitRequest(BaseModel):
    proof_url: str

    class Config:
        json_schema_extra = {
            'example': {'proof_url': 'https://storage.example.com/payment-proofs/receipt.jpg'}
        }


class TransactionStatusUpdateRequest(BaseModel):
    status: str

    class Config:
        json_schema_extra = {'example': {'status': 'done'}}


class TransactionItemResponse(BaseModel):
    id: uuid.UUID
    ticket_tier_id: uuid.UUID
    quantity: int
    unit_price: int
    tier_name: Optional[str] = None


class TransactionResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'event_id': '01936d8f-5e73-7c4e-a9c5-000000000001',
                'user_id': '01936d8f-5e73-7c4e-a9c5-000000000002',
                'status': 'awaiting_payment',
                'subtotal_amount': 1000000,
                'discount_amount': 100000,
                'paid_amount': 900000,
                'items': [],
            }
        },
    }

    id: uuid.UUID
    event_id: uuid.UUID
    user_id: uuid.UUID
    status: str
    voucher_code: Optional[str] = None
    subtotal_amount: int
    discount_amount: int
    paid_amount: int
    proof_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    payment_deadline: Optional[datetime] = None
    items: List[TransactionItemResponse] = Field(default_factory=list)


class TransactionDetailResponse(TransactionResponse):
    event_title: str


class SweepResponse(BaseModel):
    expired_count: int
    released_seat_count: int
    failed_count: int
