"""Database engine and session factory.

Provides database connectivity and session management for the orgscope
backend. SQLite engines (development and tests) are configured so that DDL
runs inside the surrounding transaction and foreign keys are enforced,
matching PostgreSQL semantics the tenancy migration relies on.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from .config import get_settings

# Execution option asking SQLite to take the write lock when the transaction
# begins instead of on first write.
SQLITE_IMMEDIATE = "sqlite_immediate"


def _configure_sqlite(engine: Engine) -> None:
    """Apply the pysqlite transactional DDL recipe to an engine.

    pysqlite never emits BEGIN before DDL, so ALTER TABLE would autocommit.
    Disabling the driver's transaction handling and emitting BEGIN ourselves
    makes schema changes roll back with everything else.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(SQLITE_IMMEDIATE):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the given URL.

    Pool settings only apply to server databases; SQLite engines get the
    transactional DDL configuration instead.
    """
    engine_kwargs = {
        "pool_pre_ping": True,
        "echo": echo,
    }

    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10

    engine = create_engine(database_url, **engine_kwargs)

    if engine.dialect.name == "sqlite":
        _configure_sqlite(engine)

    return engine


engine = create_db_engine(get_settings().DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """Context manager for database sessions.

    Usage:
        with get_db_session() as session:
            session.query(Organization).all()

    Automatically commits on success, rolls back on exception.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """Dependency for FastAPI endpoints.

    Usage:
        @app.get("/organizations")
        def list_organizations(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
