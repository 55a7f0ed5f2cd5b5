"""Unit tests for the tenancy migration plan and report

Tests cover:
- Standard plan contents (tables, order, indexes, owner columns)
- ADD COLUMN DDL rendering per dialect
- Report state machine
- Unsupported dialects
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql, sqlite

from orgscope.config import Settings
from orgscope.tenancy.exceptions import MigrationError, UnsupportedDialect
from orgscope.tenancy.migration import (
    MigrationReport,
    MigrationState,
    PLAN_VERSION,
    SchemaEditor,
    TENANT_COLUMNS,
    TenantColumn,
    default_plan,
)
from orgscope.tenancy.migration.schema_editor import AddColumn


class TestDefaultPlan:
    """Test the standard organization tenancy plan"""

    def test_tables_in_order(self):
        assert [tenant_column.table for tenant_column in TENANT_COLUMNS] == [
            "platforms", "conversations", "messages", "analytics", "users",
        ]

    def test_indexed_tables(self):
        assert [tenant_column.index_name for tenant_column in TENANT_COLUMNS if tenant_column.index] == [
            "platforms_org_id_idx", "conversations_org_id_idx", "analytics_org_id_idx",
        ]

    def test_owner_columns(self):
        owners = {tenant_column.table: tenant_column.owner_column for tenant_column in TENANT_COLUMNS}

        assert owners == {
            "platforms": "user_id",
            "conversations": "user_id",
            "messages": None,
            "analytics": "user_id",
            "users": "id",
        }

    def test_plan_from_settings(self):
        settings = Settings(
            DEFAULT_ORGANIZATION_ID="acme",
            DEFAULT_ORGANIZATION_NAME="Acme",
            DEFAULT_PRINCIPAL_ID="owner",
        )

        plan = default_plan(settings)

        assert plan.version == PLAN_VERSION == "0001_organization_tenancy"
        assert plan.organization.id == "acme"
        assert plan.organization.name == "Acme"
        assert plan.organization.plan == "enterprise"
        assert plan.default_principal_id == "owner"
        assert [t.name for t in plan.core_tables] == ["organizations", "organization_members"]

    def test_default_bootstrap_values(self):
        plan = default_plan(Settings())

        assert plan.organization.id == "1"
        assert plan.organization.name == "Default Organization"
        assert plan.default_principal_id == "1"

    def test_tenant_column_is_nullable_foreign_key(self):
        column = TenantColumn("platforms").build_column()

        assert column.name == "organization_id"
        assert column.nullable
        fk = next(iter(column.foreign_keys))
        assert fk.target_fullname == "organizations.id"
        assert fk.ondelete == "SET NULL"


class TestAddColumnDDL:
    """Test ALTER TABLE rendering"""

    @pytest.mark.parametrize("dialect", [postgresql.dialect(), sqlite.dialect()])
    def test_inline_reference(self, dialect):
        ddl = str(AddColumn("platforms", TenantColumn("platforms").build_column()).compile(dialect=dialect))

        assert ddl.startswith("ALTER TABLE platforms ADD COLUMN organization_id VARCHAR")
        assert ddl.endswith("REFERENCES organizations (id) ON DELETE SET NULL")
        assert "NOT NULL" not in ddl


class TestMigrationReport:
    """Test the run state machine"""

    def test_successful_lifecycle(self):
        report = MigrationReport(version=PLAN_VERSION)

        report.transition(MigrationState.IN_PROGRESS)
        report.transition(MigrationState.COMMITTED)

        assert report.state == MigrationState.COMMITTED

    def test_cannot_commit_without_starting(self):
        report = MigrationReport(version=PLAN_VERSION)

        with pytest.raises(MigrationError):
            report.transition(MigrationState.COMMITTED)

    def test_terminal_states_are_final(self):
        report = MigrationReport(version=PLAN_VERSION)
        report.transition(MigrationState.IN_PROGRESS)
        report.transition(MigrationState.ROLLED_BACK)

        with pytest.raises(MigrationError):
            report.transition(MigrationState.COMMITTED)

    def test_empty_report_is_noop(self):
        report = MigrationReport(version=PLAN_VERSION, rows_backfilled={"analytics": 0})

        assert not report.schema_changed
        assert report.total_backfilled == 0
        assert report.to_dict()["state"] == "NOT_STARTED"


class TestMigrationLock:
    """Test lock acquisition per dialect"""

    def test_postgresql_takes_advisory_lock(self):
        connection = MagicMock()
        connection.dialect.name = "postgresql"

        SchemaEditor(connection).acquire_migration_lock(42)

        statement, params = connection.execute.call_args[0]
        assert "pg_advisory_xact_lock" in str(statement)
        assert params == {"key": 42}

    def test_unsupported_dialect_rejected(self):
        connection = MagicMock()
        connection.dialect.name = "mysql"

        with pytest.raises(UnsupportedDialect):
            SchemaEditor(connection).acquire_migration_lock(42)
