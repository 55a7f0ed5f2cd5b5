#!/usr/bin/env python
"""Apply the organization tenancy migration.

Retrofits organization scoping onto an existing single-tenant database:
creates the organizations tables, adds organization_id to every
tenant-scoped table, creates the bootstrap organization and assigns the
default principal's existing rows to it. Safe to run repeatedly.

Usage:
    python backend/scripts/migrate_tenancy.py
    python backend/scripts/migrate_tenancy.py --json

Environment Variables:
    DATABASE_URL: Database connection string
    DEFAULT_ORGANIZATION_ID: Bootstrap organization id (default: 1)
    DEFAULT_ORGANIZATION_NAME: Bootstrap organization name (default: Default Organization)
    DEFAULT_PRINCIPAL_ID: User linked to the bootstrap organization as admin (default: 1)

Exit status is 0 when the migration committed and 1 when it was rolled back.
"""

import argparse
import json
import sys
from pathlib import Path

# Add backend/src to Python path
backend_src = Path(__file__).resolve().parent.parent / "src"
sys.path.insert(0, str(backend_src))

from sqlalchemy.exc import SQLAlchemyError

from orgscope.config import get_settings
from orgscope.database import create_db_engine
from orgscope.observability.logging_config import configure_logging
from orgscope.tenancy.exceptions import MigrationError, MigrationFailed
from orgscope.tenancy.migration import TenancyMigration, default_plan


def print_report(report) -> None:
    print(f"SUCCESS: Tenancy migration {report.version} {report.state.value}")
    print(f"  Tables created:   {', '.join(report.tables_created) or '-'}")
    print(f"  Columns added:    {', '.join(report.columns_added) or '-'}")
    print(f"  Indexes created:  {', '.join(report.indexes_created) or '-'}")
    print(f"  Organization:     {'created' if report.organization_created else 'already present'}")
    print(f"  Admin membership: {'created' if report.membership_created else 'already present or skipped'}")
    for table_name, count in report.rows_backfilled.items():
        print(f"  Backfilled {table_name}: {count}")


def main(argv=None) -> int:
    """Run the migration and return the process exit status."""
    parser = argparse.ArgumentParser(description="Apply the organization tenancy migration")
    parser.add_argument("--database-url", help="Override DATABASE_URL")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON, stream=sys.stderr)

    try:
        engine = create_db_engine(args.database_url or settings.DATABASE_URL)
    except SQLAlchemyError as e:
        print(f"ERROR: Cannot open database: {e}")
        return 1
    migration = TenancyMigration(default_plan(settings))

    try:
        report = migration.run(engine)
    except MigrationFailed as e:
        print(f"ERROR: {e}")
        print("  All changes were rolled back")
        return 1
    except MigrationError as e:
        print(f"ERROR: {e}")
        return 1
    finally:
        engine.dispose()

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print_report(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
