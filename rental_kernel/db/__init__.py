"""Database layer - engine, sessions, column types and document store client."""

from rental_kernel.db.base import Base
from rental_kernel.db.documents import connect_document_store, ensure_indexes
from rental_kernel.db.engine import (
    create_session_factory,
    create_tables,
    drop_tables,
    init_engine,
    session_scope,
)
from rental_kernel.db.functions import minutes_between, seconds_between
from rental_kernel.db.types import MONEY_DECIMAL_PLACES, UTCDateTime, round_money

__all__ = [
    "Base",
    "init_engine",
    "create_session_factory",
    "session_scope",
    "create_tables",
    "drop_tables",
    "connect_document_store",
    "ensure_indexes",
    "seconds_between",
    "minutes_between",
    "MONEY_DECIMAL_PLACES",
    "UTCDateTime",
    "round_money",
]
