"""
rental_services -- Package init and public API.

Responsibility:
    Orchestration services that compose the pure rules (rental_engines/)
    with the repositories of rental_kernel/. This is the layer that reads
    the Clock on behalf of callers.

Architecture position:
    Services -- stateful orchestration over engines + kernel.

    Dependency direction (enforced by tests/architecture/test_layer_boundaries.py):
        rental_services/ -> rental_engines/  (allowed)
        rental_services/ -> rental_kernel/   (allowed)
        rental_engines/  -> rental_services/ (FORBIDDEN)
        rental_kernel/   -> rental_services/ (FORBIDDEN)
"""

from rental_services.lifecycle_service import RentalLifecycleService, ReturnOutcome
from rental_services.reporting_service import (
    OverdueReport,
    RentalReportingService,
    UnpaidReport,
)

__all__ = [
    "OverdueReport",
    "RentalLifecycleService",
    "RentalReportingService",
    "ReturnOutcome",
    "UnpaidReport",
]
