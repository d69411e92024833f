"""
Module: rental_kernel.db.documents
Responsibility: MongoDB client setup for the customer and vehicle
    collections.
Architecture position: Kernel > DB. The document store is an independent
    failure domain from the relational store; nothing here touches
    SQLAlchemy.

Invariants enforced:
    - The client is built from an explicit DocumentStoreConfig.
    - connect_document_store() pings the deployment before returning; an
      unreachable store raises StoreConnectionError.
    - Customer and Vehicle collections carry a unique index on ``uid``
      (the application key), not on Mongo's ``_id``.
"""

from collections.abc import Callable
from typing import Any

from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from rental_config.schema import DocumentStoreConfig
from rental_kernel.exceptions import StoreConnectionError
from rental_kernel.logging_config import get_logger

logger = get_logger("db.documents")


def connect_document_store(
    config: DocumentStoreConfig,
    client_factory: Callable[..., Any] = MongoClient,
) -> Database:
    """
    Connect to MongoDB and return the configured database.

    Args:
        config: Document store settings.
        client_factory: MongoClient-compatible constructor.

    Raises:
        StoreConnectionError: if the ping fails.
    """
    client = client_factory(
        config.uri,
        serverSelectionTimeoutMS=config.server_selection_timeout_ms,
    )
    database = client[config.database]
    try:
        database.command("ping")
    except PyMongoError as exc:
        logger.error(
            "document_store_unreachable",
            extra={"database": config.database},
            exc_info=True,
        )
        client.close()
        raise StoreConnectionError("document", config.database, str(exc)) from exc

    ensure_indexes(database, config)
    logger.info("document_store_connected", extra={"database": config.database})
    return database


def ensure_indexes(database: Database, config: DocumentStoreConfig) -> None:
    """Create the unique ``uid`` index on both collections (idempotent)."""
    for name in (config.customer_collection, config.vehicle_collection):
        database[name].create_index([("uid", ASCENDING)], unique=True, name="uid_unique")
