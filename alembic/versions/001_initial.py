"""Initial migration

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255)),
        sa.Column('phone_number', sa.String(30)),
        sa.Column('is_admin', sa.Boolean(), default=False),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('refresh_token', sa.String(500)),
        sa.Column('last_login', sa.DateTime()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create menu_items table
    op.create_table(
        'menu_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), default=''),
        sa.Column('image_url', sa.String(500), default=''),
        sa.Column('category', sa.String(50), nullable=False, default='burgers'),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False, default=True),
        sa.Column('is_favorite', sa.Boolean(), nullable=False, default=False),
        sa.Column('tags', postgresql.JSON(), default=[]),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create orders table
    op.create_table(
        'orders',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id')),
        sa.Column('customer_name', sa.String(255), nullable=False),
        sa.Column('phone_number', sa.String(30), nullable=False),
        sa.Column('email', sa.String(255)),
        sa.Column('delivery_type', sa.String(20), nullable=False, default='delivery'),
        sa.Column('delivery_address', sa.Text()),
        sa.Column('scheduled_for', sa.DateTime()),
        sa.Column('notes', sa.Text()),
        sa.Column('subtotal', sa.Integer(), nullable=False, default=0),
        sa.Column('delivery_fee', sa.Integer(), nullable=False, default=0),
        sa.Column('total_amount', sa.Integer(), nullable=False, default=0),
        sa.Column('order_status', sa.String(20), nullable=False, default='pending'),
        sa.Column('payment_method', sa.String(20), nullable=False, default='cash'),
        sa.Column('payment_status', sa.String(20), nullable=False, default='pending'),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create order_items table
    op.create_table(
        'order_items',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('menu_item_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('menu_items.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text()),
        sa.Column('price_at_time', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create payments table
    op.create_table(
        'payments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('orders.id'), nullable=False),
        sa.Column('tracking_id', sa.String(100), unique=True, nullable=False),
        sa.Column('provider', sa.String(50), nullable=False, default='pesapal'),
        sa.Column('status', sa.String(50), nullable=False, default='initiated'),
        sa.Column('amount', sa.Integer()),
        sa.Column('confirmation_code', sa.String(100)),
        sa.Column('payment_method', sa.String(100)),
        sa.Column('payment_data', postgresql.JSON()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create reservations table
    op.create_table(
        'reservations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone_number', sa.String(30), nullable=False),
        sa.Column('reservation_time', sa.DateTime(), nullable=False),
        sa.Column('guests', sa.Integer(), nullable=False),
        sa.Column('special_request', sa.Text()),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create messages table
    op.create_table(
        'messages',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('sender', sa.String(20), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('customer_name', sa.String(255)),
        sa.Column('customer_email', sa.String(255)),
        sa.Column('customer_phone', sa.String(30)),
        sa.Column('is_read', sa.Boolean(), nullable=False, default=False),
        sa.Column('reply_to', postgresql.UUID(as_uuid=True), sa.ForeignKey('messages.id')),
        sa.Column('created_at', sa.DateTime(), default=sa.func.now()),
    )

    # Create indexes
    op.create_index('ix_menu_items_category', 'menu_items', ['category'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])
    op.create_index('ix_orders_order_status', 'orders', ['order_status'])
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_payments_order_id', 'payments', ['order_id'])
    op.create_index('ix_reservations_reservation_time', 'reservations', ['reservation_time'])
    op.create_index('ix_messages_created_at', 'messages', ['created_at'])


def downgrade() -> None:
    op.drop_table('messages')
    op.drop_table('reservations')
    op.drop_table('payments')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('menu_items')
    op.drop_table('users')
