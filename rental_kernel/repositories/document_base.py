"""
Module: rental_kernel.repositories.document_base
Responsibility: Shared plumbing for the MongoDB-backed repositories
    (customers and vehicles): uid-keyed insert, replace and delete on one
    collection.
Architecture position: Kernel > Repositories. Independent of SQLAlchemy.

Invariants enforced:
    - Documents are addressed by the application ``uid``, never by ``_id``.
    - A duplicate uid on insert raises DocumentAlreadyExistsError (the
      collection carries a unique index, see db.documents.ensure_indexes).
    - Mongo's ``_id`` never leaves the repository.
"""

from abc import ABC
from typing import Any

from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from rental_kernel.exceptions import DocumentAlreadyExistsError
from rental_kernel.logging_config import get_logger

logger = get_logger("repositories.documents")

_NO_ID = {"_id": False}


class DocumentRepository(ABC):
    """Base class for repositories over one uid-keyed collection."""

    def __init__(self, database: Database, collection_name: str):
        self.collection_name = collection_name
        self.collection: Collection = database[collection_name]

    def _insert(self, document: dict[str, Any]) -> str:
        uid = document["uid"]
        try:
            # insert_one adds _id to the dict it is given
            self.collection.insert_one(dict(document))
        except DuplicateKeyError as exc:
            logger.warning(
                "document_duplicate_uid",
                extra={"collection": self.collection_name, "uid": uid},
            )
            raise DocumentAlreadyExistsError(self.collection_name, uid) from exc
        logger.info(
            "document_created",
            extra={"collection": self.collection_name, "uid": uid},
        )
        return uid

    def _replace(self, document: dict[str, Any]) -> bool:
        result = self.collection.replace_one({"uid": document["uid"]}, document)
        return result.matched_count > 0

    def _delete(self, uid: str) -> bool:
        result = self.collection.delete_one({"uid": uid})
        deleted = result.deleted_count > 0
        logger.info(
            "document_deleted" if deleted else "document_delete_noop",
            extra={"collection": self.collection_name, "uid": uid},
        )
        return deleted

    def _find_one(self, uid: str) -> dict[str, Any] | None:
        return self.collection.find_one({"uid": uid}, _NO_ID)

    def _find(self, query: dict[str, Any]) -> list[dict[str, Any]]:
        return list(self.collection.find(query, _NO_ID).sort("uid", 1))

    def _count(self, query: dict[str, Any]) -> int:
        return self.collection.count_documents(query)
