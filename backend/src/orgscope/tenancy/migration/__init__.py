"""Organization tenancy migration: declarative plan plus idempotent engine."""

from .descriptors import (
    TenantColumn,
    BootstrapOrganization,
    MigrationPlan,
    TENANT_COLUMNS,
    PLAN_VERSION,
    default_plan,
)
from .engine import TenancyMigration, MigrationReport, MigrationState
from .schema_editor import SchemaEditor

__all__ = [
    "TenantColumn",
    "BootstrapOrganization",
    "MigrationPlan",
    "TENANT_COLUMNS",
    "PLAN_VERSION",
    "default_plan",
    "TenancyMigration",
    "MigrationReport",
    "MigrationState",
    "SchemaEditor",
]
