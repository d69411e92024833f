"""
RentalConfig schema.

Typed, frozen configuration passed explicitly to the engine, the document
store client and the repositories at startup. YAML files and environment
variables are parsed into these types by ``rental_config.loader``; nothing
else in the system reads credentials or connection strings directly.
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Relational store (contracts, billing)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RelationalStoreConfig:
    """Connection and pool settings for the SQLAlchemy engine."""

    url: str
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_pre_ping: bool = True
    pool_timeout: int = 30
    pool_recycle: int = 1800

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("relational.url must not be empty")
        if self.pool_size < 1:
            raise ValueError("relational.pool_size must be >= 1")
        if self.max_overflow < 0:
            raise ValueError("relational.max_overflow cannot be negative")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


# ---------------------------------------------------------------------------
# Document store (customers, vehicles)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DocumentStoreConfig:
    """Connection settings for the MongoDB client."""

    uri: str
    database: str = "easyloc"
    customer_collection: str = "Customer"
    vehicle_collection: str = "Vehicle"
    server_selection_timeout_ms: int = 5000

    def __post_init__(self) -> None:
        if not self.uri:
            raise ValueError("documents.uri must not be empty")
        if not self.database:
            raise ValueError("documents.database must not be empty")


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RentalConfig:
    """Complete startup configuration for the back office."""

    relational: RelationalStoreConfig
    documents: DocumentStoreConfig | None = None
    log_level: str = "INFO"
