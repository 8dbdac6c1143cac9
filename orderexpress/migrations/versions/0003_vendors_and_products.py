"""add vendors, drink products and packaging

Revision ID: 0003_vendors_and_products
Revises: 0002_invitations
Create Date: 2026-10-19 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

revision = '0003_vendors_and_products'
down_revision = '0002_invitations'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'vendors',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('account_number', sa.String(length=128), nullable=True),
        sa.Column('office_phone', sa.String(length=64), nullable=True),
        sa.Column('website', sa.String(length=512), nullable=True),
        sa.Column('delivery_days', sa.Text(), nullable=True),
        sa.Column('case_min', sa.Integer(), nullable=True),
        sa.Column('dollar_min', sa.Numeric(10, 2), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id'], ),
    )
    op.create_index('ix_vendors_business_id', 'vendors', ['business_id'], unique=False)

    op.create_table(
        'drink_products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('sku', sa.String(length=128), nullable=True),
        sa.Column('category', sa.String(length=128), nullable=True),
        sa.Column('subcategory', sa.String(length=128), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id'], ),
    )
    op.create_index('ix_drink_products_business_id', 'drink_products', ['business_id'], unique=False)

    op.create_table(
        'drink_products_packaging',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=True),
        sa.Column('units_per_case', sa.Integer(), nullable=True),
        sa.Column('unit_volume', sa.String(length=32), nullable=True),
        sa.Column('measure_type', sa.String(length=32), nullable=True),
        sa.Column('unit_type', sa.String(length=32), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=True),
        sa.ForeignKeyConstraint(['product_id'], ['drink_products.id'], ),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ),
    )
    op.create_index('ix_drink_products_packaging_product_id', 'drink_products_packaging', ['product_id'], unique=False)


def downgrade():
    op.drop_index('ix_drink_products_packaging_product_id', table_name='drink_products_packaging')
    op.drop_table('drink_products_packaging')
    op.drop_index('ix_drink_products_business_id', table_name='drink_products')
    op.drop_table('drink_products')
    op.drop_index('ix_vendors_business_id', table_name='vendors')
    op.drop_table('vendors')
