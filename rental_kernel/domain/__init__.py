"""Pure domain layer: value types and the clock abstraction."""

from rental_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from rental_kernel.domain.values import Billing, Contract, Customer, Vehicle

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "Contract",
    "Billing",
    "Customer",
    "Vehicle",
]
