"""init_marketplace_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17

Schema:
- event: events with capacity and the event-level available_seats aggregate
- ticket_tier: per-tier seat ledger (available_seats is the authoritative counter)
- ticket_transaction: checkout transactions and their lifecycle status
- ticket_transaction_item: (tier, quantity, unit_price) lines of a transaction
- promotion: voucher codes per event
- profile: user roles
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'event',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('organizer_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('country', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('state', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('city', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('venue', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('time_start', sa.Time(), nullable=True),
        sa.Column('time_end', sa.Time(), nullable=True),
        sa.Column('price', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('image_url', sa.String(length=1024), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('available_seats', sa.Integer(), nullable=False),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.CheckConstraint(
            'available_seats >= 0 AND available_seats <= capacity',
            name='ck_event_available_within_capacity',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_event_organizer_id'), 'event', ['organizer_id'])
    op.create_index(op.f('ix_event_start_date'), 'event', ['start_date'])

    op.create_table(
        'ticket_tier',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('event_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('unit_price', sa.Integer(), nullable=False),
        sa.Column('total_seats', sa.Integer(), nullable=False),
        sa.Column('available_seats', sa.Integer(), nullable=False),
        sa.CheckConstraint(
            'available_seats >= 0 AND available_seats <= total_seats',
            name='ck_ticket_tier_available_within_total',
        ),
        sa.CheckConstraint('unit_price >= 0', name='ck_ticket_tier_price_non_negative'),
        sa.ForeignKeyConstraint(['event_id'], ['event.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'name', name='uq_ticket_tier_event_name'),
    )
    op.create_index(op.f('ix_ticket_tier_event_id'), 'ticket_tier', ['event_id'])

    op.create_table(
        'ticket_transaction',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('event_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('voucher_code', sa.String(length=64), nullable=True),
        sa.Column('subtotal_amount', sa.Integer(), nullable=False),
        sa.Column('discount_amount', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('paid_amount', sa.Integer(), nullable=False),
        sa.Column('proof_url', sa.String(length=2048), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('paid_amount >= 0', name='ck_ticket_transaction_paid_non_negative'),
        sa.ForeignKeyConstraint(['event_id'], ['event.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_ticket_transaction_event_id'), 'ticket_transaction', ['event_id'])
    op.create_index(op.f('ix_ticket_transaction_user_id'), 'ticket_transaction', ['user_id'])
    op.create_index(op.f('ix_ticket_transaction_status'), 'ticket_transaction', ['status'])
    op.create_index(
        op.f('ix_ticket_transaction_created_at'), 'ticket_transaction', ['created_at']
    )

    op.create_table(
        'ticket_transaction_item',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('transaction_id', sa.Uuid(), nullable=False),
        sa.Column('ticket_tier_id', sa.Uuid(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_transaction_item_quantity_positive'),
        sa.ForeignKeyConstraint(['transaction_id'], ['ticket_transaction.id']),
        sa.ForeignKeyConstraint(['ticket_tier_id'], ['ticket_tier.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_ticket_transaction_item_transaction_id'),
        'ticket_transaction_item',
        ['transaction_id'],
    )
    op.create_index(
        op.f('ix_ticket_transaction_item_ticket_tier_id'),
        'ticket_transaction_item',
        ['ticket_tier_id'],
    )

    op.create_table(
        'promotion',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('event_id', sa.Uuid(), nullable=False),
        sa.Column('code', sa.String(length=64), nullable=False),
        sa.Column('discount_type', sa.String(length=16), nullable=False),
        sa.Column('discount_value', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        sa.ForeignKeyConstraint(['event_id'], ['event.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'code', name='uq_promotion_event_code'),
    )
    op.create_index(op.f('ix_promotion_event_id'), 'promotion', ['event_id'])

    op.create_table(
        'profile',
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False, server_default='customer'),
        sa.PrimaryKeyConstraint('user_id'),
    )


def downgrade() -> None:
    op.drop_table('profile')
    op.drop_index(op.f('ix_promotion_event_id'), table_name='promotion')
    op.drop_table('promotion')
    op.drop_index(
        op.f('ix_ticket_transaction_item_ticket_tier_id'), table_name='ticket_transaction_item'
    )
    op.drop_index(
        op.f('ix_ticket_transaction_item_transaction_id'), table_name='ticket_transaction_item'
    )
    op.drop_table('ticket_transaction_item')
    op.drop_index(op.f('ix_ticket_transaction_created_at'), table_name='ticket_transaction')
    op.drop_index(op.f('ix_ticket_transaction_status'), table_name='ticket_transaction')
    op.drop_index(op.f('ix_ticket_transaction_user_id'), table_name='ticket_transaction')
    op.drop_index(op.f('ix_ticket_transaction_event_id'), table_name='ticket_transaction')
    op.drop_table('ticket_transaction')
    op.drop_index(op.f('ix_ticket_tier_event_id'), table_name='ticket_tier')
    op.drop_table('ticket_tier')
    op.drop_index(op.f('ix_event_start_date'), table_name='event')
    op.drop_index(op.f('ix_event_organizer_id'), table_name='event')
    op.drop_table('event')
