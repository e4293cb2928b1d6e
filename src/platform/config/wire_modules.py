"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.marketplace.app.command import (
    admin_set_transaction_status_use_case,
    cancel_transaction_use_case,
    create_checkout_use_case,
    create_event_and_tiers_use_case,
    reconcile_event_inventory_use_case,
    submit_payment_proof_use_case,
    sweep_expired_transactions_use_case,
)
from src.service.marketplace.app.query import (
    get_event_use_case,
    get_transaction_use_case,
    list_events_use_case,
    list_transactions_use_case,
    validate_promotion_use_case,
)
from src.service.marketplace.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    create_checkout_use_case,
    submit_payment_proof_use_case,
    admin_set_transaction_status_use_case,
    cancel_transaction_use_case,
    sweep_expired_transactions_use_case,
    reconcile_event_inventory_use_case,
    create_event_and_tiers_use_case,
    get_event_use_case,
    list_events_use_case,
    get_transaction_use_case,
    list_transactions_use_case,
    validate_promotion_use_case,
    role_auth,
]
