"""Integration tests for the ways the tenancy migration is launched

Tests cover:
- Alembic revision applying the plan inside Alembic's transaction
- migrate_tenancy.py command-line script exit status and output
"""

import importlib.util
import json
import logging
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import inspect, text
from sqlalchemy.exc import NoSuchTableError

from fixtures.legacy_schema import sqlite_url


pytestmark = pytest.mark.integration

BACKEND_DIR = Path(__file__).resolve().parent.parent.parent


def load_module(name: str, path: Path):
    spec = importlib.util.spec_from_file_location(name, path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def revision():
    return load_module(
        "revision_001_add_organization_tenancy",
        BACKEND_DIR / "migrations" / "versions" / "001_add_organization_tenancy.py",
    )


@pytest.fixture
def migrate_tenancy():
    yield load_module("migrate_tenancy", BACKEND_DIR / "scripts" / "migrate_tenancy.py")

    # main() installs a handler bound to the captured stderr of the test
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)


class TestAlembicRevision:
    """Test the Alembic revision"""

    def test_revision_identifiers(self, revision):
        assert revision.revision == "001_add_organization_tenancy"
        assert revision.down_revision is None

    def test_upgrade_applies_plan(self, revision, seeded_legacy_engine):
        with seeded_legacy_engine.connect() as connection:
            with connection.begin():
                context = MigrationContext.configure(connection)
                with Operations.context(context):
                    revision.upgrade()

        inspector = inspect(seeded_legacy_engine)
        assert inspector.has_table("organizations")
        assert "organization_id" in {col["name"] for col in inspector.get_columns("platforms")}

        with seeded_legacy_engine.connect() as connection:
            members = connection.execute(text("SELECT user_id, role FROM organization_members")).all()
        assert members == [("1", "admin")]

    def test_upgrade_rolls_back_with_alembic_transaction(self, revision, legacy_engine):
        with legacy_engine.connect() as connection:
            connection.exec_driver_sql("DROP TABLE messages")
            connection.commit()

        with pytest.raises(NoSuchTableError):
            with legacy_engine.connect() as connection:
                with connection.begin():
                    context = MigrationContext.configure(connection)
                    with Operations.context(context):
                        revision.upgrade()

        inspector = inspect(legacy_engine)
        assert not inspector.has_table("organizations")
        assert "organization_id" not in {col["name"] for col in inspector.get_columns("platforms")}


class TestMigrateTenancyScript:
    """Test the command-line script"""

    def test_success_exit_status(self, migrate_tenancy, seeded_legacy_engine, tmp_path, capsys):
        exit_code = migrate_tenancy.main(["--database-url", sqlite_url(tmp_path / "legacy.db")])

        assert exit_code == 0
        output = capsys.readouterr().out
        assert "SUCCESS" in output
        assert "platforms.organization_id" in output

    def test_json_report_on_rerun(self, migrate_tenancy, seeded_legacy_engine, tmp_path, capsys):
        url = sqlite_url(tmp_path / "legacy.db")
        migrate_tenancy.main(["--database-url", url])
        capsys.readouterr()

        exit_code = migrate_tenancy.main(["--database-url", url, "--json"])

        assert exit_code == 0
        report = json.loads(capsys.readouterr().out)
        assert report["state"] == "COMMITTED"
        assert report["columns_added"] == []
        assert report["organization_created"] is False

    def test_failure_exit_status(self, migrate_tenancy, tmp_path, capsys):
        # Empty database: the business tables the plan expects do not exist
        exit_code = migrate_tenancy.main(["--database-url", sqlite_url(tmp_path / "empty.db")])

        assert exit_code == 1
        output = capsys.readouterr().out
        assert "ERROR" in output
        assert "rolled back" in output

    def test_unreachable_database_exit_status(self, migrate_tenancy, tmp_path, capsys):
        exit_code = migrate_tenancy.main(["--database-url", sqlite_url(tmp_path / "missing" / "app.db")])

        assert exit_code == 1
        output = capsys.readouterr().out
        assert output.startswith("ERROR")
        assert "step 'connect'" in output

    def test_malformed_url_exit_status(self, migrate_tenancy, capsys):
        exit_code = migrate_tenancy.main(["--database-url", "not a database url"])

        assert exit_code == 1
        assert capsys.readouterr().out.startswith("ERROR: Cannot open database")
