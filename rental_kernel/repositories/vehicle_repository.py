"""
VehicleRepository -- vehicle documents in the ``Vehicle`` collection.
"""

from pymongo.database import Database

from rental_kernel.domain.values import Vehicle
from rental_kernel.repositories.document_base import DocumentRepository

DEFAULT_COLLECTION = "Vehicle"


class VehicleRepository(DocumentRepository):
    """Vehicle persistence keyed by ``uid``, plus mileage counts."""

    def __init__(self, database: Database, collection_name: str = DEFAULT_COLLECTION):
        super().__init__(database, collection_name)

    def create(self, vehicle: Vehicle) -> str:
        """Insert a vehicle. Raises DocumentAlreadyExistsError on a taken uid."""
        return self._insert(vehicle.to_document())

    def update(self, vehicle: Vehicle) -> bool:
        return self._replace(vehicle.to_document())

    def delete(self, uid: str) -> bool:
        return self._delete(uid)

    def find_by_uid(self, uid: str) -> Vehicle | None:
        document = self._find_one(uid)
        return Vehicle.from_document(document) if document is not None else None

    def count_with_km_greater(self, km: int) -> int:
        """Number of vehicles with strictly more than ``km`` kilometres."""
        return self._count({"km": {"$gt": km}})

    def count_with_km_lesser(self, km: int) -> int:
        """Number of vehicles with strictly fewer than ``km`` kilometres."""
        return self._count({"km": {"$lt": km}})
