"""
rental_services.reporting_service -- Overdue and unpaid reports.

Responsibility:
    Composes the aggregate queries of the contract and billing
    repositories into report objects stamped with the Clock time.

Architecture position:
    Services -- read-only orchestration over kernel repositories.

Invariants enforced:
    - Every aggregate is computed in the store; the service only assembles
      results and sums the outstanding balances of the unpaid statuses.
    - All overdue figures of one report are evaluated at the same ``as_of``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from rental_engines.payment import ZERO, PaymentStatus
from rental_kernel.domain.clock import Clock
from rental_kernel.domain.values import Contract
from rental_kernel.logging_config import get_logger
from rental_kernel.repositories.billing_repository import BillingRepository
from rental_kernel.repositories.contract_repository import ContractRepository

logger = get_logger("services.reporting")


@dataclass(frozen=True)
class OverdueReport:
    """Overdue situation at ``as_of``."""

    as_of: datetime
    contracts: tuple[Contract, ...]
    # None when no customer has an overdue contract.
    average_overdue_count_per_customer: Decimal | None
    average_overdue_minutes_per_vehicle: dict[str, Decimal] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.contracts)

    @property
    def contract_ids(self) -> list[int]:
        return [c.id for c in self.contracts]


@dataclass(frozen=True)
class UnpaidReport:
    """Contracts whose payments do not cover the price, at ``as_of``."""

    as_of: datetime
    statuses: tuple[PaymentStatus, ...]

    @property
    def count(self) -> int:
        return len(self.statuses)

    @property
    def total_outstanding(self) -> Decimal:
        return sum((s.outstanding for s in self.statuses), ZERO)

    @property
    def contract_ids(self) -> list[int]:
        return [s.contract_id for s in self.statuses]


class RentalReportingService:
    """Read-only reports over contracts and billing."""

    def __init__(
        self,
        contracts: ContractRepository,
        billings: BillingRepository,
        clock: Clock,
    ):
        self.contracts = contracts
        self.billings = billings
        self.clock = clock

    def overdue_report(self) -> OverdueReport:
        """Overdue contracts and the two overdue averages."""
        as_of = self.clock.now()
        report = OverdueReport(
            as_of=as_of,
            contracts=tuple(self.contracts.list_overdue(as_of)),
            average_overdue_count_per_customer=(
                self.contracts.average_overdue_count_per_customer(as_of)
            ),
            average_overdue_minutes_per_vehicle=(
                self.contracts.average_overdue_minutes_per_vehicle()
            ),
        )
        logger.info(
            "overdue_report_built",
            extra={
                "as_of": as_of,
                "overdue_count": report.count,
                "average_overdue_count_per_customer": (
                    report.average_overdue_count_per_customer
                ),
            },
        )
        return report

    def overdue_count_between(self, start: datetime, end: datetime) -> int:
        """Overdue contracts whose loc_end_datetime falls within [start, end]."""
        return self.contracts.count_overdue_between(start, end, now=self.clock.now())

    def unpaid_report(self) -> UnpaidReport:
        """Payment position of every contract that is not fully paid."""
        as_of = self.clock.now()
        report = UnpaidReport(
            as_of=as_of,
            statuses=tuple(self.billings.list_unpaid_statuses()),
        )
        logger.info(
            "unpaid_report_built",
            extra={
                "as_of": as_of,
                "unpaid_count": report.count,
                "total_outstanding": report.total_outstanding,
            },
        )
        return report
