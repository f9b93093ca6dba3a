from alembic import op
import sqlalchemy as sa

revision = '0001_init'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'orders',
        sa.Column('id', sa.String(20), primary_key=True),
        sa.Column('total', sa.Integer, nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('payment_status', sa.String(50), nullable=False, server_default='pending'),
        sa.Column('customer', sa.JSON, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('payment_id', sa.String(100), nullable=True)
    )
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])
    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('order_id', sa.String(20), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.String(50), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('price', sa.Integer, nullable=False),
        sa.Column('qty', sa.Integer, nullable=False),
        sa.Column('seller_id', sa.String(50), nullable=True)
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

def downgrade():
    op.drop_table('order_items')
    op.drop_table('orders')
