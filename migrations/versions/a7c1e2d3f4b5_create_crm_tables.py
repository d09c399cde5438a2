"""create clients, subscriptions, invoices, assets tables

Revision ID: a7c1e2d3f4b5
Revises:
Create Date: 2026-10-16
"""
from alembic import op
import sqlalchemy as sa


revision = 'a7c1e2d3f4b5'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'clients',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('source', sa.String(255), nullable=True),
        sa.Column('status', sa.String(16), nullable=False, server_default='active'),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(64), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('company', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # One subscription per client is kept by the upsert, not by a constraint
    op.create_table(
        'subscriptions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('client_id', sa.String(36), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(3), nullable=False, server_default='USD'),
        sa.Column('cycle', sa.String(16), nullable=False, server_default='monthly'),
        sa.Column('next_payment_date', sa.Date(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_subscriptions_client_id', 'subscriptions', ['client_id'])

    op.create_table(
        'invoices',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('subscription_id', sa.String(36), nullable=True),
        sa.Column('client_id', sa.String(36), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('status', sa.String(16), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_invoices_client_id', 'invoices', ['client_id'])
    op.create_index('ix_invoices_subscription_id', 'invoices', ['subscription_id'])

    op.create_table(
        'assets',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('client_id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('type', sa.String(16), nullable=False),
        sa.Column('size', sa.BigInteger(), nullable=True),
        sa.Column('file_url', sa.Text(), nullable=False),
        sa.Column('bucket_path', sa.Text(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_assets_client_id', 'assets', ['client_id'])


def downgrade():
    op.drop_index('ix_assets_client_id', 'assets')
    op.drop_table('assets')
    op.drop_index('ix_invoices_subscription_id', 'invoices')
    op.drop_index('ix_invoices_client_id', 'invoices')
    op.drop_table('invoices')
    op.drop_index('ix_subscriptions_client_id', 'subscriptions')
    op.drop_table('subscriptions')
    op.drop_table('clients')
