"""Schema introspection and idempotent DDL on a single connection.

Every operation runs on the connection handed in, so it takes part in the
caller's transaction. Inspectors are created per call; a cached inspector
would not see columns added earlier in the same transaction.
"""

import logging
from typing import Sequence

from sqlalchemy import Column, Index, MetaData, String, Table, inspect, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import NoSuchTableError
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.schema import ExecutableDDLElement

from ...database import SQLITE_IMMEDIATE
from ..exceptions import UnsupportedDialect

logger = logging.getLogger(__name__)


class AddColumn(ExecutableDDLElement):
    """ALTER TABLE ... ADD COLUMN including an inline REFERENCES clause.

    Inline references are accepted by both PostgreSQL and SQLite, unlike a
    separate ADD CONSTRAINT which SQLite does not support.
    """

    inherit_cache = False

    def __init__(self, table_name: str, column: Column):
        self.table_name = table_name
        # get_column_specification expects the column to belong to a table
        Table(table_name, MetaData(), column)
        self.column = column


@compiles(AddColumn)
def _compile_add_column(element, compiler, **kw):
    preparer = compiler.preparer
    ddl = "ALTER TABLE %s ADD COLUMN %s" % (
        preparer.quote(element.table_name),
        compiler.get_column_specification(element.column),
    )
    for fk in element.column.foreign_keys:
        ref_table, ref_column = fk.target_fullname.rsplit(".", 1)
        ddl += " REFERENCES %s (%s)" % (preparer.quote(ref_table), preparer.quote(ref_column))
        if fk.ondelete:
            ddl += " ON DELETE %s" % fk.ondelete
    return ddl


class SchemaEditor:
    """Introspection plus "apply if absent" DDL helpers."""

    def __init__(self, connection: Connection):
        self.connection = connection

    @property
    def dialect_name(self) -> str:
        return self.connection.dialect.name

    def acquire_migration_lock(self, key: int) -> None:
        """Serialize migration runs for the rest of the transaction.

        PostgreSQL takes a transaction-scoped advisory lock. SQLite
        connections opened by the engine's run() already hold the database
        write lock (BEGIN IMMEDIATE).

        Raises:
            UnsupportedDialect: For databases without transactional DDL
        """
        if self.dialect_name == "postgresql":
            self.connection.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": key})
        elif self.dialect_name == "sqlite":
            if not self.connection.get_execution_options().get(SQLITE_IMMEDIATE):
                logger.warning("SQLite transaction was not opened with BEGIN IMMEDIATE")
        else:
            raise UnsupportedDialect(
                f"Tenancy migration requires transactional DDL, not supported on {self.dialect_name}"
            )

    def table_exists(self, table_name: str) -> bool:
        return inspect(self.connection).has_table(table_name)

    def column_exists(self, table_name: str, column_name: str) -> bool:
        """Check for a column.

        Raises:
            sqlalchemy.exc.NoSuchTableError: If the table does not exist
        """
        inspector = inspect(self.connection)
        if not inspector.has_table(table_name):
            raise NoSuchTableError(table_name)
        columns = inspector.get_columns(table_name)
        return any(col["name"] == column_name for col in columns)

    def index_exists(self, table_name: str, index_name: str) -> bool:
        indexes = inspect(self.connection).get_indexes(table_name)
        return any(ix["name"] == index_name for ix in indexes)

    def add_column(self, table_name: str, column: Column) -> None:
        self.connection.execute(AddColumn(table_name, column))

    def create_index_if_not_exists(
        self,
        table_name: str,
        index_name: str,
        column_names: Sequence[str],
    ) -> bool:
        """Create an index unless one with the same name exists.

        Returns:
            bool: True if the index was created
        """
        if self.index_exists(table_name, index_name):
            return False
        stub = Table(table_name, MetaData(), *[Column(name, String()) for name in column_names])
        Index(index_name, *[stub.c[name] for name in column_names]).create(self.connection)
        return True

    def create_table_if_not_exists(self, table: Table) -> bool:
        """Create a table (and its indexes) unless it exists.

        Returns:
            bool: True if the table was created
        """
        if self.table_exists(table.name):
            return False
        table.create(self.connection)
        return True
