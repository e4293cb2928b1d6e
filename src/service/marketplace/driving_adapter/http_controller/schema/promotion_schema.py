from datetime import date
import uuid

from pydantic import BaseModel


class PromotionResponse(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    code: str
    discount_type: str
    discount_value: int
    start_date: date
    end_date: date
    status: str
