"""Declarative description of the organization tenancy migration.

A MigrationPlan lists, in order, every table that receives a tenant-scope
column, whether that column is indexed, and which column identifies the
owning principal for backfill. The engine applies each entry only if it is
absent, so the plan can be re-run against a partially or fully migrated
schema.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from sqlalchemy import Column, ForeignKey, String, Table

from ...config import Settings, get_settings
from ...models.membership import OrganizationMember
from ...models.organization import Organization

TENANT_COLUMN = "organization_id"
PLAN_VERSION = "0001_organization_tenancy"


@dataclass(frozen=True)
class TenantColumn:
    """Tenant-scope column to add to one table.

    Attributes:
        table: Table receiving the column
        index: Whether to create a supporting index
        owner_column: Column holding the owning principal id, used to backfill
            the default principal's rows. None disables backfill.
        column: Name of the tenant-scope column
        references: Referenced "table.column"
        ondelete: Referential action; SET NULL detaches records from a
            deleted organization instead of deleting them
    """

    table: str
    index: bool = True
    owner_column: Optional[str] = "user_id"
    column: str = TENANT_COLUMN
    references: str = "organizations.id"
    ondelete: str = "SET NULL"

    @property
    def index_name(self) -> str:
        return f"{self.table}_org_id_idx"

    def build_column(self) -> Column:
        """Build the nullable foreign key column to add."""
        return Column(
            self.column,
            String(),
            ForeignKey(self.references, ondelete=self.ondelete),
            nullable=True,
        )


@dataclass(frozen=True)
class BootstrapOrganization:
    """Organization that absorbs all pre-tenancy data."""

    id: str
    name: str
    plan: str = "enterprise"


@dataclass(frozen=True)
class MigrationPlan:
    """Versioned, ordered set of tenancy schema changes and backfills."""

    version: str
    columns: Tuple[TenantColumn, ...]
    organization: BootstrapOrganization
    default_principal_id: str
    core_tables: Tuple[Table, ...] = field(
        default=(Organization.__table__, OrganizationMember.__table__)
    )


TENANT_COLUMNS: Tuple[TenantColumn, ...] = (
    TenantColumn("platforms", index=True),
    TenantColumn("conversations", index=True),
    # Messages are always reached through their conversation
    TenantColumn("messages", index=False, owner_column=None),
    TenantColumn("analytics", index=True),
    TenantColumn("users", index=False, owner_column="id"),
)


def default_plan(settings: Optional[Settings] = None) -> MigrationPlan:
    """Build the standard tenancy plan from application settings."""
    settings = settings or get_settings()
    return MigrationPlan(
        version=PLAN_VERSION,
        columns=TENANT_COLUMNS,
        organization=BootstrapOrganization(
            id=settings.DEFAULT_ORGANIZATION_ID,
            name=settings.DEFAULT_ORGANIZATION_NAME,
            plan=settings.DEFAULT_ORGANIZATION_PLAN,
        ),
        default_principal_id=settings.DEFAULT_PRINCIPAL_ID,
    )
