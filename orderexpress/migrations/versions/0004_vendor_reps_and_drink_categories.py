"""add vendor reps and drink categories

Revision ID: 0004_vendor_reps_and_drink_categories
Revises: 0003_vendors_and_products
Create Date: 2026-10-19 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

revision = '0004_vendor_reps_and_drink_categories'
down_revision = '0003_vendors_and_products'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'vendors_reps',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=64), nullable=True),
        sa.Column('send_by_email', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('send_by_text', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ),
    )
    op.create_index('ix_vendors_reps_vendor_id', 'vendors_reps', ['vendor_id'], unique=False)

    for table in ('drink_categories', 'drink_subcategories'):
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('business_id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=128), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['business_id'], ['businesses.id'], ),
        )
        op.create_index(f'ix_{table}_business_id', table, ['business_id'], unique=False)

    op.add_column('drink_products', sa.Column('category_id', sa.Integer(), nullable=True))
    op.add_column('drink_products', sa.Column('subcategory_id', sa.Integer(), nullable=True))
    op.create_foreign_key(
        'fk_drink_products_category_id',
        'drink_products',
        'drink_categories',
        ['category_id'],
        ['id'],
        ondelete='SET NULL'
    )
    op.create_foreign_key(
        'fk_drink_products_subcategory_id',
        'drink_products',
        'drink_subcategories',
        ['subcategory_id'],
        ['id'],
        ondelete='SET NULL'
    )


def downgrade():
    op.drop_constraint('fk_drink_products_subcategory_id', 'drink_products', type_='foreignkey')
    op.drop_constraint('fk_drink_products_category_id', 'drink_products', type_='foreignkey')
    op.drop_column('drink_products', 'subcategory_id')
    op.drop_column('drink_products', 'category_id')

    for table in ('drink_subcategories', 'drink_categories'):
        op.drop_index(f'ix_{table}_business_id', table_name=table)
        op.drop_table(table)

    op.drop_index('ix_vendors_reps_vendor_id', table_name='vendors_reps')
    op.drop_table('vendors_reps')
