"""
Module: ledger_kernel.db.engine
Responsibility: SQLAlchemy engine initialization, session factory management,
    and transactional scope utilities.  This is the single point of database
    connection configuration for the entire system.
Architecture position: Kernel > DB.  May import from db/base.py.
    MUST NOT import from models/, services/, selectors/, domain/, or outer
    layers (except create_tables/drop_tables which pull in the ORM registry).

Invariants enforced:
    - PostgreSQL is the production backend (READ COMMITTED, pooled with
      pre-ping).  SQLite is accepted for tests and local tooling; it gets a
      single shared connection so an in-memory database survives across
      sessions.
    - session_scope() commits on success and rolls back on any exception,
      which is the atomicity guarantee behind "no entry is ever partially
      posted".

Failure modes:
    - RuntimeError if get_engine/get_session/get_session_factory are called
      before init_engine_from_url().
    - RuntimeError from init_engine_from_env() when LEDGER_DATABASE_URL is unset.
"""

import os
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from ledger_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

DATABASE_URL_ENV = "LEDGER_DATABASE_URL"

# Module-level engine and session factory
_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def _enable_sqlite_savepoints(engine: Engine) -> None:
    """
    Let SQLAlchemy emit BEGIN itself on pysqlite connections.

    The pysqlite driver defers BEGIN on its own, which breaks SAVEPOINT
    (``Session.begin_nested``).  Seeding relies on savepoints.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(
    database_url: str,
    echo: bool = False,
    pool_size: int = 20,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Create (but do not install) an engine for ``database_url``.

    SQLite URLs get a StaticPool and ``check_same_thread=False`` so that one
    in-memory database is visible to every session of the process.
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        _enable_sqlite_savepoints(engine)
        return engine

    return create_engine(
        database_url,
        echo=echo,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=pool_pre_ping,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
        isolation_level="READ COMMITTED",
    )


def init_engine_from_url(database_url: str, echo: bool = False, **pool_options) -> Engine:
    """
    Build the process-wide engine and session factory.

    ``pool_options`` are forwarded to ``build_engine`` (ignored for SQLite).
    Structured logging is configured as a side effect so that a host which
    only initializes storage still gets JSON log output.
    """
    global _engine, _SessionFactory

    _engine = build_engine(database_url, echo=echo, **pool_options)
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={"dialect": _engine.dialect.name, "echo": echo, **pool_options},
    )
    return _engine


def init_engine_from_env(echo: bool = False) -> Engine:
    """Same as ``init_engine_from_url`` with the URL taken from LEDGER_DATABASE_URL."""
    database_url = os.environ.get(DATABASE_URL_ENV)
    if not database_url:
        raise RuntimeError(f"{DATABASE_URL_ENV} is not set.")
    return init_engine_from_url(database_url, echo=echo)


def _require_initialized() -> None:
    if _engine is None or _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")


def get_engine() -> Engine:
    _require_initialized()
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Factory shared by the process; take one session per request from it."""
    _require_initialized()
    return _SessionFactory


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope(
    factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Postconditions: On normal exit, session is committed and closed.
        On exception, session is rolled back and closed.  The exception
        is re-raised to the caller.

    Args:
        factory: Session factory to use; defaults to the module-level one.

    Usage:
        with session_scope() as session:
            session.add(entity)
            # Commits on successful exit, rolls back on exception
    """
    session = factory() if factory is not None else get_session()
    logger.debug("transaction_started")
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables(engine: Engine | None = None) -> None:
    """
    Create all tables defined in the kernel and module ORM models.

    Postconditions: All tables exist in the database.  Immutability listeners
        are registered for append-only models.
    """
    from ledger_kernel.db.base import Base
    from ledger_kernel.db.immutability import register_immutability_listeners
    from ledger_modules._orm_registry import import_all_orm_models

    engine = engine or get_engine()
    import_all_orm_models()
    Base.metadata.create_all(engine)
    register_immutability_listeners()
    logger.info(
        "tables_created",
        extra={"table_count": len(Base.metadata.tables)},
    )


def drop_tables(engine: Engine | None = None) -> None:
    """
    Drop all tables. Use with caution - primarily for testing.
    """
    from ledger_kernel.db.base import Base

    engine = engine or get_engine()
    Base.metadata.drop_all(engine)


def reset_engine() -> None:
    """
    Reset the engine and session factory.

    Disposes of all pooled connections.  Primarily for testing.
    """
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()

    _engine = None
    _SessionFactory = None
