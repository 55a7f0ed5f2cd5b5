"""Tenancy migration engine.

Applies a MigrationPlan to an existing single-tenant schema:

1. Acquire the migration lock (one run at a time).
2. Create the organizations / organization_members tables if absent.
3. For each tenant column, in plan order: add the column if absent, then
   create its index if the plan asks for one and it is absent.
4. Create the bootstrap organization if absent, link the default principal
   to it as an accepted admin, and backfill the principal's rows whose
   tenant column is still NULL.

Everything happens in one transaction. A run is either COMMITTED or
ROLLED_BACK; partial progress is never persisted. Every step is guarded by
an existence check, so re-running against a migrated schema changes nothing.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.sql import column, table

from ...config import get_settings
from ...database import SQLITE_IMMEDIATE
from ..exceptions import MigrationError, MigrationFailed
from ..roles import InviteStatus, OrganizationRole
from .descriptors import MigrationPlan, TenantColumn, default_plan
from .schema_editor import SchemaEditor

logger = logging.getLogger(__name__)


class MigrationState(str, Enum):
    """Lifecycle of a single migration run."""
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMMITTED = "COMMITTED"
    ROLLED_BACK = "ROLLED_BACK"


_TRANSITIONS = {
    MigrationState.NOT_STARTED: {MigrationState.IN_PROGRESS},
    MigrationState.IN_PROGRESS: {MigrationState.COMMITTED, MigrationState.ROLLED_BACK},
    MigrationState.COMMITTED: set(),
    MigrationState.ROLLED_BACK: set(),
}


@dataclass
class MigrationReport:
    """Outcome of a migration run. A no-op run has every counter empty."""

    version: str
    state: MigrationState = MigrationState.NOT_STARTED
    step: Optional[str] = None
    tables_created: List[str] = field(default_factory=list)
    columns_added: List[str] = field(default_factory=list)
    indexes_created: List[str] = field(default_factory=list)
    organization_created: bool = False
    membership_created: bool = False
    rows_backfilled: Dict[str, int] = field(default_factory=dict)

    def transition(self, new_state: MigrationState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise MigrationError(f"Invalid migration state change {self.state.value} -> {new_state.value}")
        self.state = new_state

    @property
    def schema_changed(self) -> bool:
        return bool(self.tables_created or self.columns_added or self.indexes_created)

    @property
    def total_backfilled(self) -> int:
        return sum(self.rows_backfilled.values())

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "state": self.state.value,
            "tables_created": list(self.tables_created),
            "columns_added": list(self.columns_added),
            "indexes_created": list(self.indexes_created),
            "organization_created": self.organization_created,
            "membership_created": self.membership_created,
            "rows_backfilled": dict(self.rows_backfilled),
        }


class TenancyMigration:
    """Runs a MigrationPlan atomically and idempotently.

    Usage:
        report = TenancyMigration().run(engine)

        # Inside an Alembic revision (Alembic owns the transaction)
        TenancyMigration().apply(op.get_bind())
    """

    def __init__(self, plan: Optional[MigrationPlan] = None, lock_key: Optional[int] = None):
        self.plan = plan or default_plan()
        self.lock_key = lock_key if lock_key is not None else get_settings().MIGRATION_LOCK_KEY

    def run(self, engine: Engine) -> MigrationReport:
        """Run the plan in its own connection and transaction.

        Returns:
            MigrationReport: Report of a COMMITTED run

        Raises:
            MigrationFailed: If any step failed; nothing was persisted
        """
        report = MigrationReport(version=self.plan.version)
        report.transition(MigrationState.IN_PROGRESS)
        logger.info(
            f"Tenancy migration {self.plan.version} started",
            extra={"migration_version": self.plan.version},
        )

        try:
            report.step = "connect"
            with engine.connect() as connection:
                connection.execution_options(**{SQLITE_IMMEDIATE: True})
                # On SQLite the write lock is taken by BEGIN IMMEDIATE here
                report.step = "lock"
                with connection.begin():
                    self._apply(connection, report)
        except Exception as e:
            report.transition(MigrationState.ROLLED_BACK)
            logger.error(
                f"Tenancy migration {self.plan.version} rolled back at step '{report.step}'",
                exc_info=True,
                extra={"migration_version": self.plan.version},
            )
            raise MigrationFailed(report.step, e, report) from e

        report.transition(MigrationState.COMMITTED)
        logger.info(
            f"Tenancy migration {self.plan.version} committed: "
            f"{len(report.columns_added)} columns, {len(report.indexes_created)} indexes, "
            f"{report.total_backfilled} rows backfilled",
            extra={"migration_version": self.plan.version},
        )
        return report

    def apply(self, connection: Connection) -> MigrationReport:
        """Apply the plan inside a transaction owned by the caller.

        The caller is responsible for commit and rollback.

        Raises:
            MigrationError: If the connection has no open transaction
        """
        if not connection.in_transaction():
            raise MigrationError("Tenancy migration must run inside an open transaction")
        report = MigrationReport(version=self.plan.version)
        report.transition(MigrationState.IN_PROGRESS)
        self._apply(connection, report)
        return report

    def _apply(self, connection: Connection, report: MigrationReport) -> None:
        editor = SchemaEditor(connection)

        report.step = "lock"
        editor.acquire_migration_lock(self.lock_key)

        for core_table in self.plan.core_tables:
            report.step = f"create_table:{core_table.name}"
            if editor.create_table_if_not_exists(core_table):
                report.tables_created.append(core_table.name)
                logger.info(f"Created table {core_table.name}", extra={"table": core_table.name})

        for tenant_column in self.plan.columns:
            self._apply_column(editor, tenant_column, report)

        report.step = "bootstrap_organization"
        report.organization_created = self._ensure_organization(connection)

        report.step = "default_principal"
        if not self._principal_exists(connection):
            logger.warning(
                f"Default principal {self.plan.default_principal_id} not found, skipping membership and backfill",
                extra={"principal_id": self.plan.default_principal_id},
            )
            return

        report.step = "default_membership"
        report.membership_created = self._ensure_membership(connection)

        for tenant_column in self.plan.columns:
            if tenant_column.owner_column is None:
                continue
            report.step = f"backfill:{tenant_column.table}"
            report.rows_backfilled[tenant_column.table] = self._backfill(connection, tenant_column)

    def _apply_column(self, editor: SchemaEditor, tenant_column: TenantColumn, report: MigrationReport) -> None:
        report.step = f"add_column:{tenant_column.table}"
        if editor.column_exists(tenant_column.table, tenant_column.column):
            logger.info(
                f"{tenant_column.column} already exists in {tenant_column.table}, skipping",
                extra={"table": tenant_column.table},
            )
        else:
            editor.add_column(tenant_column.table, tenant_column.build_column())
            report.columns_added.append(f"{tenant_column.table}.{tenant_column.column}")
            logger.info(f"Added {tenant_column.column} to {tenant_column.table}", extra={"table": tenant_column.table})

        if tenant_column.index:
            report.step = f"create_index:{tenant_column.table}"
            if editor.create_index_if_not_exists(tenant_column.table, tenant_column.index_name, [tenant_column.column]):
                report.indexes_created.append(tenant_column.index_name)
                logger.info(f"Created index {tenant_column.index_name}", extra={"table": tenant_column.table})

    def _ensure_organization(self, connection: Connection) -> bool:
        organization = self.plan.organization
        organizations = table("organizations", column("id"), column("name"), column("plan"))

        existing = connection.execute(
            select(organizations.c.id).where(organizations.c.id == organization.id)
        ).first()
        if existing is not None:
            return False

        connection.execute(
            insert(organizations).values(id=organization.id, name=organization.name, plan=organization.plan)
        )
        logger.info(
            f"Created bootstrap organization {organization.id}",
            extra={"organization_id": organization.id},
        )
        return True

    def _principal_exists(self, connection: Connection) -> bool:
        users = table("users", column("id"))
        row = connection.execute(
            select(users.c.id).where(users.c.id == self.plan.default_principal_id)
        ).first()
        return row is not None

    def _ensure_membership(self, connection: Connection) -> bool:
        organization_id = self.plan.organization.id
        principal_id = self.plan.default_principal_id
        members = table(
            "organization_members",
            column("id"),
            column("organization_id"),
            column("user_id"),
            column("role"),
            column("invite_status"),
        )

        existing = connection.execute(
            select(members.c.id).where(
                members.c.organization_id == organization_id,
                members.c.user_id == principal_id,
            )
        ).first()
        if existing is not None:
            return False

        connection.execute(
            insert(members).values(
                organization_id=organization_id,
                user_id=principal_id,
                role=OrganizationRole.ADMIN.value,
                invite_status=InviteStatus.ACCEPTED.value,
            )
        )
        logger.info(
            f"Linked principal {principal_id} to organization {organization_id} as admin",
            extra={"principal_id": principal_id, "organization_id": organization_id},
        )
        return True

    def _backfill(self, connection: Connection, tenant_column: TenantColumn) -> int:
        """Assign the default principal's unscoped rows to the bootstrap organization.

        Only rows whose tenant column is NULL are touched.
        """
        target = table(tenant_column.table, column(tenant_column.column), column(tenant_column.owner_column))
        result = connection.execute(
            update(target)
            .where(
                target.c[tenant_column.owner_column] == self.plan.default_principal_id,
                target.c[tenant_column.column].is_(None),
            )
            .values({tenant_column.column: self.plan.organization.id})
        )
        if result.rowcount:
            logger.info(
                f"Backfilled {result.rowcount} rows in {tenant_column.table}",
                extra={"table": tenant_column.table, "organization_id": self.plan.organization.id},
            )
        return result.rowcount
