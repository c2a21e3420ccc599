"""initial_schema

Revision ID: 001_initial
Revises:
Create Date: 2026-01-05

Catalog (brands, campaigns, products, variants, color images), carts,
orders with per-line status tracking, and users.

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('user_id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('cpf', sa.String(14), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        *_timestamps(),
    )
    op.create_index('idx_users_status', 'users', ['status'])

    op.create_table(
        'brands',
        sa.Column('brand_id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(150), nullable=False, unique=True),
        *_timestamps(),
    )

    op.create_table(
        'campaigns',
        sa.Column('campaign_id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('brand_id', sa.Uuid(),
                  sa.ForeignKey('brands.brand_id', ondelete='SET NULL'), nullable=True),
        sa.Column('gender', sa.String(10), nullable=False, server_default='female'),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        *_timestamps(),
        sa.CheckConstraint('end_time >= start_time', name='chk_campaign_time'),
    )
    op.create_index('idx_campaigns_time', 'campaigns', ['start_time', 'end_time'])

    op.create_table(
        'products',
        sa.Column('product_id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('campaign_id', sa.Uuid(),
                  sa.ForeignKey('campaigns.campaign_id', ondelete='SET NULL'), nullable=True),
        sa.Column('brand_id', sa.Uuid(),
                  sa.ForeignKey('brands.brand_id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('price >= 0', name='chk_product_price_positive'),
    )
    op.create_index('idx_products_campaign', 'products', ['campaign_id'])

    op.create_table(
        'product_variants',
        sa.Column('variant_id', sa.Uuid(), primary_key=True),
        sa.Column('product_id', sa.Uuid(),
                  sa.ForeignKey('products.product_id', ondelete='CASCADE'), nullable=False),
        sa.Column('size', sa.String(20), nullable=False),
        sa.Column('color', sa.String(50), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.CheckConstraint('price >= 0', name='chk_variant_price_positive'),
    )
    op.create_index('idx_variants_product', 'product_variants', ['product_id'])

    op.create_table(
        'product_color_images',
        sa.Column('image_id', sa.Uuid(), primary_key=True),
        sa.Column('product_id', sa.Uuid(),
                  sa.ForeignKey('products.product_id', ondelete='CASCADE'), nullable=False),
        sa.Column('color', sa.String(50), nullable=False),
        sa.Column('image_path', sa.String(500), nullable=False),
        sa.Column('thumbnail_path', sa.String(500), nullable=True),
    )

    op.create_table(
        'cart_lines',
        sa.Column('line_id', sa.Uuid(), primary_key=True),
        sa.Column('owner_kind', sa.String(10), nullable=False),
        sa.Column('owner_key', sa.String(64), nullable=False),
        sa.Column('product_id', sa.Uuid(),
                  sa.ForeignKey('products.product_id', ondelete='CASCADE'), nullable=False),
        sa.Column('variant_id', sa.Uuid(),
                  sa.ForeignKey('product_variants.variant_id', ondelete='CASCADE'), nullable=False),
        sa.Column('color', sa.String(50), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('quantity >= 1', name='chk_cart_line_quantity'),
        sa.UniqueConstraint('owner_kind', 'owner_key', 'product_id', 'variant_id', 'color',
                            name='uq_cart_line_owner_variant_color',
                            postgresql_nulls_not_distinct=True),
    )
    op.create_index('idx_cart_lines_owner', 'cart_lines', ['owner_kind', 'owner_key'])

    op.create_table(
        'orders',
        sa.Column('order_id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.user_id'), nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('notifications_sent', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.CheckConstraint('notifications_sent >= 0', name='chk_order_notifications'),
    )
    op.create_index('idx_orders_user_created', 'orders', ['user_id', 'created_at'])

    op.create_table(
        'order_lines',
        sa.Column('line_id', sa.Uuid(), primary_key=True),
        sa.Column('order_id', sa.Uuid(),
                  sa.ForeignKey('orders.order_id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.product_id'), nullable=False),
        sa.Column('variant_id', sa.Uuid(),
                  sa.ForeignKey('product_variants.variant_id', ondelete='SET NULL'), nullable=True),
        sa.Column('product_name', sa.String(255), nullable=False),
        sa.Column('size', sa.String(20), nullable=True),
        sa.Column('color', sa.String(50), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('stock_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('is_processed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('quantity >= 1', name='chk_order_line_quantity'),
        sa.CheckConstraint('unit_price >= 0', name='chk_order_line_price'),
    )
    op.create_index('idx_order_lines_order', 'order_lines', ['order_id'])
    op.create_index('idx_order_lines_product_payment', 'order_lines',
                    ['product_id', 'payment_status'])


def downgrade() -> None:
    op.drop_table('order_lines')
    op.drop_table('orders')
    op.drop_table('cart_lines')
    op.drop_table('product_color_images')
    op.drop_table('product_variants')
    op.drop_table('products')
    op.drop_table('campaigns')
    op.drop_table('brands')
    op.drop_table('users')
