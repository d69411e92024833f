"""ORM models for the relational store (contract, billing)."""

from rental_kernel.models.billing import BillingModel
from rental_kernel.models.contract import ContractModel

__all__ = ["ContractModel", "BillingModel"]
