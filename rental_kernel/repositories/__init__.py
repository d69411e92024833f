"""
Repositories -- persistence for the rental kernel.

Relational store (SQLAlchemy):
    ContractRepository, BillingRepository

Document store (PyMongo):
    CustomerRepository, VehicleRepository
"""

from rental_kernel.repositories.base import BaseRepository, round_average
from rental_kernel.repositories.billing_repository import BillingRepository
from rental_kernel.repositories.contract_repository import ContractRepository
from rental_kernel.repositories.customer_repository import CustomerRepository
from rental_kernel.repositories.document_base import DocumentRepository
from rental_kernel.repositories.vehicle_repository import VehicleRepository

__all__ = [
    "BaseRepository",
    "BillingRepository",
    "ContractRepository",
    "CustomerRepository",
    "DocumentRepository",
    "VehicleRepository",
    "round_average",
]
