"""Initial storefront schema

Revision ID: 3f1c2a9d7e10
Revises: 
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Revision identifiers used by Alembic
revision: str = '3f1c2a9d7e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCOPE_CHECK = "(user_id IS NULL) <> (session_id IS NULL)"


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('slug', sa.String(), nullable=False, unique=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('price_cents', sa.Integer(), sa.CheckConstraint('price_cents >= 0'), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('unit', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('long_description', sa.Text(), nullable=True),
        sa.Column('image', sa.String(), nullable=True),
        sa.Column('images', sa.JSON(), nullable=True),
        sa.Column('features', sa.JSON(), nullable=True),
        sa.Column('specifications', sa.JSON(), nullable=True),
        sa.Column('benefits', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_products_category', 'products', ['category'])

    # Cart and wishlist rows belong to exactly one scope
    op.create_table(
        'cart_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=True, index=True),
        sa.Column('session_id', sa.String(), nullable=True, index=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(SCOPE_CHECK, name='ck_cartitem_single_scope'),
        sa.CheckConstraint('quantity >= 1', name='ck_cartitem_quantity_positive'),
        sa.UniqueConstraint('user_id', 'product_id', name='uq_cartitem_user_product'),
        sa.UniqueConstraint('session_id', 'product_id', name='uq_cartitem_session_product'),
    )
    op.create_table(
        'wishlist_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=True, index=True),
        sa.Column('session_id', sa.String(), nullable=True, index=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(SCOPE_CHECK, name='ck_wishlistitem_single_scope'),
        sa.UniqueConstraint('user_id', 'product_id', name='uq_wishlistitem_user_product'),
        sa.UniqueConstraint('session_id', 'product_id', name='uq_wishlistitem_session_product'),
    )

    op.create_table(
        'user_addresses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False, index=True),
        sa.Column('label', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=False),
        sa.Column('address_line1', sa.String(), nullable=False),
        sa.Column('address_line2', sa.String(), nullable=True),
        sa.Column('city', sa.String(), nullable=False),
        sa.Column('state', sa.String(), nullable=False),
        sa.Column('zip_code', sa.String(), nullable=False),
        sa.Column('country', sa.String(), nullable=False),
        sa.Column('is_default', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    # At most one default address per user (partial index)
    op.create_index(
        'uq_user_addresses_one_default', 'user_addresses', ['user_id'],
        unique=True,
        postgresql_where=sa.text('is_default'), sqlite_where=sa.text('is_default'),
    )

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_number', sa.String(), nullable=False, unique=True),
        sa.Column('user_id', sa.String(), nullable=True, index=True),
        sa.Column('guest_session_id', sa.String(), nullable=True, index=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, index=True),
        sa.Column('payment_status', sa.String(), nullable=False),
        sa.Column('payment_method', sa.String(), nullable=True),
        sa.Column('total_cents', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('shipping_full_name', sa.String(), nullable=True),
        sa.Column('shipping_phone', sa.String(), nullable=True),
        sa.Column('shipping_address_line1', sa.String(), nullable=True),
        sa.Column('shipping_address_line2', sa.String(), nullable=True),
        sa.Column('shipping_city', sa.String(), nullable=True),
        sa.Column('shipping_state', sa.String(), nullable=True),
        sa.Column('shipping_zip_code', sa.String(), nullable=True),
        sa.Column('shipping_country', sa.String(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='SET NULL'), nullable=True),
        sa.Column('product_name', sa.String(), nullable=False),
        sa.Column('product_price', sa.String(), nullable=False),
        sa.Column('unit_price_cents', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
    )

    op.create_table(
        'bbq_rental_packages',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('features', sa.JSON(), nullable=True),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'bbq_rental_bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('booking_reference', sa.String(), nullable=False, unique=True),
        sa.Column('package_id', sa.Integer(), sa.ForeignKey('bbq_rental_packages.id'), nullable=False, index=True),
        sa.Column('user_id', sa.String(), nullable=True, index=True),
        sa.Column('customer_name', sa.String(), nullable=False),
        sa.Column('customer_email', sa.String(), nullable=False),
        sa.Column('customer_phone', sa.String(), nullable=False),
        sa.Column('customer_address', sa.String(), nullable=True),
        sa.Column('rental_date', sa.Date(), nullable=False),
        sa.Column('return_date', sa.Date(), nullable=False),
        sa.Column('handover_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('returned_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('total_cents', sa.Integer(), nullable=False),
        sa.Column('deposit_cents', sa.Integer(), nullable=False),
        sa.Column('balance_cents', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('payment_status', sa.String(), nullable=False),
        sa.Column('booking_status', sa.String(), nullable=False, index=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'customer_reviews',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('customer_name', sa.String(), nullable=False),
        sa.Column('customer_title', sa.String(), nullable=True),
        sa.Column('review_text', sa.Text(), nullable=False),
        sa.Column('rating', sa.Integer(), sa.CheckConstraint('rating >= 1 AND rating <= 5'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, index=True),
        sa.Column('display_order', sa.Integer(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'user_profiles',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('email', sa.String(), nullable=True, index=True),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        'admins',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=True, unique=True),
        sa.Column('email', sa.String(), nullable=False, unique=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('ts', sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
        sa.Column('user_id', sa.String(), nullable=True, index=True),
        sa.Column('action', sa.String(50), index=True),
        sa.Column('resource', sa.String(50), index=True),
        sa.Column('status', sa.String(20), index=True),
        sa.Column('ip', sa.String(64), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('logs')
    op.drop_table('admins')
    op.drop_table('user_profiles')
    op.drop_table('customer_reviews')
    op.drop_table('bbq_rental_bookings')
    op.drop_table('bbq_rental_packages')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_index('uq_user_addresses_one_default', table_name='user_addresses')
    op.drop_table('user_addresses')
    op.drop_table('wishlist_items')
    op.drop_table('cart_items')
    op.drop_index('ix_products_category', table_name='products')
    op.drop_table('products')
