"""Add organization tenancy

Creates organizations and organization_members, adds a nullable
organization_id to platforms, conversations, messages, analytics and users,
and assigns the default principal's existing rows to the bootstrap
organization.

Revision ID: 001_add_organization_tenancy
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
import sys
from pathlib import Path

from alembic import op

# Add backend/src to Python path
backend_src = Path(__file__).resolve().parent.parent.parent / "src"
if str(backend_src) not in sys.path:
    sys.path.insert(0, str(backend_src))

from orgscope.tenancy.migration import TENANT_COLUMNS, TenancyMigration

# revision identifiers, used by Alembic.
revision = '001_add_organization_tenancy'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Every step is guarded by an existence check, so this also succeeds
    # against databases where the tenancy columns were added by hand.
    TenancyMigration().apply(op.get_bind())


def downgrade():
    # Bootstrap organization data is dropped together with the tables.
    for tenant_column in reversed(TENANT_COLUMNS):
        if tenant_column.index:
            op.drop_index(tenant_column.index_name, table_name=tenant_column.table)
        with op.batch_alter_table(tenant_column.table) as batch_op:
            batch_op.drop_column(tenant_column.column)

    op.drop_table('organization_members')
    op.drop_table('organizations')
