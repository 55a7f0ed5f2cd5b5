"""Test that ORM models follow the tenancy conventions the migration produces.

Verifies for every tenant-scoped table:
- organization_id is nullable (unassigned historical rows remain readable)
- Foreign key to organizations(id) with ON DELETE SET NULL
- Index named <table>_org_id_idx exactly where the migration creates one
"""

import pytest

from orgscope.models import Base
from orgscope.tenancy.migration import TENANT_COLUMNS


# Tables without organization scoping
GLOBAL_TABLES = [
    "organizations",
    "organization_members",
]


@pytest.fixture(scope="module")
def tables():
    return Base.metadata.tables


class TestTenantScopedTables:
    """Test models against the tenancy plan"""

    @pytest.mark.parametrize("tenant_column", TENANT_COLUMNS, ids=lambda tenant_column: tenant_column.table)
    def test_organization_id_nullable(self, tables, tenant_column):
        column = tables[tenant_column.table].c[tenant_column.column]

        assert column.nullable

    @pytest.mark.parametrize("tenant_column", TENANT_COLUMNS, ids=lambda tenant_column: tenant_column.table)
    def test_foreign_key_sets_null(self, tables, tenant_column):
        (fk,) = tables[tenant_column.table].c[tenant_column.column].foreign_keys

        assert fk.target_fullname == "organizations.id"
        assert fk.ondelete == "SET NULL"

    @pytest.mark.parametrize("tenant_column", TENANT_COLUMNS, ids=lambda tenant_column: tenant_column.table)
    def test_index_matches_plan(self, tables, tenant_column):
        index_names = {index.name for index in tables[tenant_column.table].indexes}

        assert (tenant_column.index_name in index_names) == tenant_column.index

    @pytest.mark.parametrize("tenant_column", [s for s in TENANT_COLUMNS if s.owner_column], ids=lambda tenant_column: tenant_column.table)
    def test_owner_column_exists(self, tables, tenant_column):
        assert tenant_column.owner_column in tables[tenant_column.table].c

    def test_every_scoped_model_in_plan(self, tables):
        scoped = {name for name, table in tables.items() if "organization_id" in table.c}
        planned = {tenant_column.table for tenant_column in TENANT_COLUMNS}

        assert scoped - set(GLOBAL_TABLES) == planned


class TestGlobalTables:

    @pytest.mark.parametrize("table_name", ["organizations"])
    def test_no_organization_id(self, tables, table_name):
        assert "organization_id" not in tables[table_name].c

    def test_one_membership_per_user_and_organization(self, tables):
        constraints = {c.name for c in tables["organization_members"].constraints}

        assert "uq_organization_members_org_user" in constraints
