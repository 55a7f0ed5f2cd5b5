"""Declarative base and portable column types shared by all models"""

from sqlalchemy import TypeDecorator, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base


class PortableJSONB(TypeDecorator):
    """JSON type that is JSONB on PostgreSQL and plain JSON elsewhere.

    Organization settings are stored as JSONB in production; SQLite
    databases used in development and tests fall back to JSON.
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())


Base = declarative_base()


# Tenant-scope column shared by every tenant-scoped table. Nullable until
# the tenancy migration backfills historical rows.
ORGANIZATION_FK = "organizations.id"
