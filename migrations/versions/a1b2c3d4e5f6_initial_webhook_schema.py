"""Initial schema for webhook ingestion

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1b2c3d4e5f6'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create tenants, orders, cancellations, returns and webhook tables."""
    op.create_table(
        'tenants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shop_name', sa.String(255), nullable=False),
        sa.Column('shopify_domain', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('shopify_domain')
    )

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('shopify_order_id', sa.String(50), nullable=False),
        sa.Column('order_number', sa.String(50), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('cancel_reason', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'shopify_order_id', name='uq_orders_tenant_shopify_order')
    )
    op.create_index('ix_orders_tenant_id', 'orders', ['tenant_id'])
    op.create_index('ix_orders_shopify_order_id', 'orders', ['shopify_order_id'])

    op.create_table(
        'shopify_cancellations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('shopify_cancellation_id', sa.String(50), nullable=False),
        sa.Column('shopify_order_id', sa.String(50), nullable=False),
        sa.Column('order_name', sa.String(50), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=False),
        sa.Column('cancel_reason', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'shopify_cancellation_id',
                            name='uq_shopify_cancellations_tenant_cancellation')
    )
    op.create_index('ix_shopify_cancellations_tenant_id', 'shopify_cancellations', ['tenant_id'])
    op.create_index('ix_shopify_cancellations_shopify_order_id', 'shopify_cancellations', ['shopify_order_id'])

    op.create_table(
        'shopify_returns',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('shopify_return_id', sa.String(50), nullable=False),
        sa.Column('shopify_order_id', sa.String(50), nullable=False),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('requested_at', sa.DateTime(), nullable=False),
        sa.Column('received_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'shopify_return_id', name='uq_shopify_returns_tenant_return')
    )
    op.create_index('ix_shopify_returns_tenant_id', 'shopify_returns', ['tenant_id'])
    op.create_index('ix_shopify_returns_shopify_order_id', 'shopify_returns', ['shopify_order_id'])

    op.create_table(
        'shopify_return_line_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('return_id', sa.Integer(), nullable=False),
        sa.Column('shopify_line_item_id', sa.String(50), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(['return_id'], ['shopify_returns.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_shopify_return_line_items_return_id', 'shopify_return_line_items', ['return_id'])

    op.create_table(
        'shopify_webhooks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('topic', sa.String(100), nullable=False),
        sa.Column('shopify_webhook_id', sa.String(100), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('status', sa.String(20), nullable=True),
        sa.Column('last_triggered_at', sa.DateTime(), nullable=True),
        sa.Column('last_tested_at', sa.DateTime(), nullable=True),
        sa.Column('test_status', sa.String(20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'topic', name='uq_shopify_webhooks_tenant_topic')
    )
    op.create_index('ix_shopify_webhooks_tenant_id', 'shopify_webhooks', ['tenant_id'])

    op.create_table(
        'webhook_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('topic', sa.String(100), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('headers', sa.JSON(), nullable=True),
        sa.Column('success', sa.Boolean(), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_webhook_events_tenant_id', 'webhook_events', ['tenant_id'])
    op.create_index('ix_webhook_events_tenant_topic_created', 'webhook_events',
                    ['tenant_id', 'topic', 'created_at'])


def downgrade():
    """Drop all webhook ingestion tables."""
    op.drop_index('ix_webhook_events_tenant_topic_created', 'webhook_events')
    op.drop_index('ix_webhook_events_tenant_id', 'webhook_events')
    op.drop_table('webhook_events')
    op.drop_index('ix_shopify_webhooks_tenant_id', 'shopify_webhooks')
    op.drop_table('shopify_webhooks')
    op.drop_index('ix_shopify_return_line_items_return_id', 'shopify_return_line_items')
    op.drop_table('shopify_return_line_items')
    op.drop_index('ix_shopify_returns_shopify_order_id', 'shopify_returns')
    op.drop_index('ix_shopify_returns_tenant_id', 'shopify_returns')
    op.drop_table('shopify_returns')
    op.drop_index('ix_shopify_cancellations_shopify_order_id', 'shopify_cancellations')
    op.drop_index('ix_shopify_cancellations_tenant_id', 'shopify_cancellations')
    op.drop_table('shopify_cancellations')
    op.drop_index('ix_orders_shopify_order_id', 'orders')
    op.drop_index('ix_orders_tenant_id', 'orders')
    op.drop_table('orders')
    op.drop_table('tenants')
