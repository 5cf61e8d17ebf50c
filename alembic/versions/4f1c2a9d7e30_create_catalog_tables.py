"""create_catalog_tables

Revision ID: 4f1c2a9d7e30
Revises:
Create Date: 2026-10-18 09:12:41.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from catalog_core.db.db_base import JSON


# revision identifiers, used by Alembic.
revision: str = '4f1c2a9d7e30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DOMAIN_TABLES = (
    'property_type',
    'operation_type',
    'sale_status',
    'amenity',
    'contact_extension',
    'lead_source',
)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def _item_columns():
    return [
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('tenant_id', sa.String(100), nullable=True),
        sa.Column('code', sa.String(100), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('name_plural', sa.String(200), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('icon', sa.String(100), nullable=True),
        sa.Column('color', sa.String(20), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('translations', JSON(), nullable=True),
    ]


def _domain_columns(table_name):
    if table_name in ('property_type', 'operation_type'):
        return [sa.Column('slug', sa.String(200), nullable=True)]
    if table_name == 'sale_status':
        return [sa.Column('is_final', sa.Boolean(), nullable=False, server_default=sa.false())]
    if table_name == 'amenity':
        return [sa.Column('category', sa.String(100), nullable=False, server_default='General')]
    if table_name == 'contact_extension':
        return [sa.Column('field_schema', JSON(), nullable=True)]
    return [sa.Column('channel', sa.String(100), nullable=True)]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'tenant',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('tenant_id', sa.String(100), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('config', JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_tenant_tenant_id', 'tenant', ['tenant_id'], unique=True)

    # Unified table: one row per item of every unified kind
    op.create_table(
        'catalog_item',
        *_item_columns(),
        sa.Column('kind', sa.String(50), nullable=False),
        sa.Column('config', JSON(), nullable=True),
        sa.Column('extra_data', JSON(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'kind', 'code', name='uq_catalog_item_tenant_kind_code'),
    )
    op.create_index('ix_catalog_item_tenant_id', 'catalog_item', ['tenant_id'])
    op.create_index('ix_catalog_item_kind_tenant', 'catalog_item', ['kind', 'tenant_id'])

    op.create_table(
        'catalog_activation_override',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('tenant_id', sa.String(100), nullable=False),
        sa.Column('kind', sa.String(50), nullable=False),
        sa.Column('code', sa.String(100), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            'tenant_id', 'kind', 'code', name='uq_activation_override_tenant_kind_code'
        ),
    )

    for table_name in DOMAIN_TABLES:
        op.create_table(
            table_name,
            *_item_columns(),
            sa.Column('slug_translations', JSON(), nullable=True),
            *_domain_columns(table_name),
            *_timestamps(),
            sa.UniqueConstraint('tenant_id', 'code', name=f'uq_{table_name}_tenant_code'),
        )
        op.create_index(f'ix_{table_name}_tenant_id', table_name, ['tenant_id'])


def downgrade() -> None:
    """Downgrade schema."""
    for table_name in reversed(DOMAIN_TABLES):
        op.drop_index(f'ix_{table_name}_tenant_id', table_name=table_name)
        op.drop_table(table_name)
    op.drop_table('catalog_activation_override')
    op.drop_index('ix_catalog_item_kind_tenant', table_name='catalog_item')
    op.drop_index('ix_catalog_item_tenant_id', table_name='catalog_item')
    op.drop_table('catalog_item')
    op.drop_index('ix_tenant_tenant_id', table_name='tenant')
    op.drop_table('tenant')
