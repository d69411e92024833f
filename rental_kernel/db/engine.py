"""
Module: rental_kernel.db.engine
Responsibility: SQLAlchemy engine initialization, session factory creation
    and the transactional scope every repository call runs in.
Architecture position: Kernel > DB. May import from db/base.py and the
    models (for create_tables). MUST NOT import repositories or services.

Invariants enforced:
    - The engine is built from an explicit RelationalStoreConfig; there is no
      module-level engine or credential state.
    - init_engine() pings the store before returning; an unreachable store
      raises StoreConnectionError and no engine is handed out.
    - SQLite connections enforce foreign keys (PRAGMA foreign_keys=ON) so
      billing.contract_id behaves as it does on server databases.
    - session_scope() commits on success, rolls back on failure and always
      closes the session, returning the connection to the pool.

Failure modes:
    - StoreConnectionError if the ping fails (fatal at startup).
    - Connection pool exhaustion if pool_size + max_overflow is exceeded.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from rental_config.schema import RelationalStoreConfig
from rental_kernel.exceptions import StoreConnectionError
from rental_kernel.logging_config import get_logger

logger = get_logger("db.engine")


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(config: RelationalStoreConfig) -> Engine:
    """
    Create the engine described by ``config`` without connecting.

    In-memory SQLite uses a StaticPool so every session sees the same
    database; file SQLite uses SQLAlchemy's default pool; server databases
    use a QueuePool sized from the configuration.
    """
    if config.is_sqlite:
        kwargs: dict = {"echo": config.echo}
        if _is_memory_sqlite(config.url):
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
        engine = create_engine(config.url, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        config.url,
        echo=config.echo,
        poolclass=QueuePool,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_pre_ping=config.pool_pre_ping,
        pool_timeout=config.pool_timeout,
        pool_recycle=config.pool_recycle,
    )


def check_connection(engine: Engine) -> None:
    """
    Ping the store.

    Raises:
        StoreConnectionError: if no connection can be established.
    """
    target = engine.url.render_as_string(hide_password=True)
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except DBAPIError as exc:
        logger.error(
            "relational_store_unreachable",
            extra={"target": target},
            exc_info=True,
        )
        engine.dispose()
        raise StoreConnectionError("relational", target, str(exc.orig or exc)) from exc


def init_engine(config: RelationalStoreConfig) -> Engine:
    """
    Build the engine and verify the store is reachable.

    Preconditions: ``config.url`` is a SQLAlchemy URL.
    Postconditions: Returns a connected-once Engine.

    Raises:
        StoreConnectionError: if the store cannot be reached.
    """
    engine = build_engine(config)
    check_connection(engine)
    logger.info(
        "engine_initialized",
        extra={
            "dialect": engine.dialect.name,
            "pool_size": config.pool_size,
            "max_overflow": config.max_overflow,
            "echo": config.echo,
        },
    )
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory handed to the repositories."""
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(
    session_factory: sessionmaker[Session],
) -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Postconditions: On normal exit, session is committed and closed.
        On exception, session is rolled back and closed. The exception
        is re-raised to the caller.

    Usage:
        with session_scope(factory) as session:
            session.add(entity)
    """
    session = session_factory()
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


def create_tables(engine: Engine) -> None:
    """Create the contract and billing tables if they do not exist."""
    from rental_kernel.db.base import Base
    import rental_kernel.models  # noqa: F401  (registers tables on Base.metadata)

    Base.metadata.create_all(engine)
    logger.info("tables_created", extra={"tables": sorted(Base.metadata.tables)})


def drop_tables(engine: Engine) -> None:
    """Drop all tables. Use with caution - primarily for testing."""
    from rental_kernel.db.base import Base
    import rental_kernel.models  # noqa: F401

    Base.metadata.drop_all(engine)
