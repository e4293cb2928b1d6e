"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.marketplace.driven_adapter.model.event_model import EventModel, TicketTierModel
from src.service.marketplace.driven_adapter.model.profile_model import ProfileModel
from src.service.marketplace.driven_adapter.model.promotion_model import PromotionModel
from src.service.marketplace.driven_adapter.model.transaction_model import (
    TransactionItemModel,
    TransactionModel,
)

__all__ = [
    'EventModel',
    'TicketTierModel',
    'TransactionModel',
    'TransactionItemModel',
    'PromotionModel',
    'ProfileModel',
]
