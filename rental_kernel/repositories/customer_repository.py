"""
CustomerRepository -- customer documents in the ``Customer`` collection.
"""

from pymongo.database import Database

from rental_kernel.domain.values import Customer
from rental_kernel.repositories.document_base import DocumentRepository

DEFAULT_COLLECTION = "Customer"


class CustomerRepository(DocumentRepository):
    """
    Customer persistence keyed by ``uid``.

    Guarantees:
        - find_* return Customer values (or None / empty list).
        - update/delete return False when no customer has the uid.
    """

    def __init__(self, database: Database, collection_name: str = DEFAULT_COLLECTION):
        super().__init__(database, collection_name)

    def create(self, customer: Customer) -> str:
        """Insert a customer. Raises DocumentAlreadyExistsError on a taken uid."""
        return self._insert(customer.to_document())

    def update(self, customer: Customer) -> bool:
        return self._replace(customer.to_document())

    def delete(self, uid: str) -> bool:
        return self._delete(uid)

    def find_by_uid(self, uid: str) -> Customer | None:
        document = self._find_one(uid)
        return Customer.from_document(document) if document is not None else None

    def find_by_name(self, first_name: str, second_name: str) -> list[Customer]:
        """Customers with exactly this first and second name, ordered by uid."""
        return [
            Customer.from_document(document)
            for document in self._find(
                {"first_name": first_name, "second_name": second_name}
            )
        ]
