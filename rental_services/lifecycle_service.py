"""
rental_services.lifecycle_service -- Contract signing, vehicle return and payment.

Responsibility:
    Drives a rental through its life: sign the contract, record the vehicle
    return, record payments. Stamps times from the injected Clock and reports
    the overdue / payment classification of the result.

Architecture position:
    Services -- stateful orchestration over engines + kernel.
    Composes ContractRepository and BillingRepository (kernel I/O) with the
    overdue and payment rules (pure engines).

Invariants enforced:
    - sign_datetime and returning_datetime come from the Clock, never from
      the caller.
    - A vehicle is returned at most once (ContractAlreadyReturnedError).
    - The overdue flag of a return is ``rental_engines.overdue.is_overdue``
      evaluated at the return time.

Failure modes:
    - ContractNotFoundError: return_vehicle on an unknown contract.
    - ContractAlreadyReturnedError: return_vehicle twice.
    - BillingContractNotFoundError: record_payment on an unknown contract.
    - InvalidContractError / InvalidBillingError: invalid input values.

Usage:
    service = RentalLifecycleService(contracts, billings, clock)

    contract = service.sign_contract(
        vehicle_uid="V-1",
        customer_uid="C-1",
        loc_begin=begin,
        loc_end=end,
        price=Decimal("500.00"),
    )
    outcome = service.return_vehicle(contract.id)
    status = service.record_payment(contract.id, Decimal("120.00"))
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from rental_engines.overdue import is_overdue, is_returned_late, overdue_minutes
from rental_engines.payment import PaymentStatus
from rental_kernel.domain.clock import Clock
from rental_kernel.domain.values import Billing, Contract
from rental_kernel.exceptions import ContractAlreadyReturnedError, ContractNotFoundError
from rental_kernel.logging_config import LogContext, get_logger
from rental_kernel.repositories.billing_repository import BillingRepository
from rental_kernel.repositories.contract_repository import ContractRepository

logger = get_logger("services.lifecycle")


@dataclass(frozen=True)
class ReturnOutcome:
    """Result of a vehicle return."""

    contract: Contract
    is_overdue: bool
    # Whole minutes late; None when returned within the grace period.
    overdue_minutes: int | None


class RentalLifecycleService:
    """
    Lifecycle operations on rental contracts.

    Contract:
        Given the two relational repositories and a Clock, performs one
        lifecycle step per call. Each repository call is its own
        transaction; there is no cross-call atomicity.

    Non-goals:
        - Does NOT check that the customer / vehicle documents exist
          (the document store is a separate failure domain).
        - Does NOT refuse payments beyond the price; overpayment is
          reported through PaymentStatus.overpaid.
    """

    def __init__(
        self,
        contracts: ContractRepository,
        billings: BillingRepository,
        clock: Clock,
    ):
        self.contracts = contracts
        self.billings = billings
        self.clock = clock

    def sign_contract(
        self,
        vehicle_uid: str,
        customer_uid: str,
        loc_begin: datetime,
        loc_end: datetime,
        price: Decimal,
    ) -> Contract:
        """
        Create a contract signed now.

        Returns:
            The contract as stored (with its id).
        """
        contract = Contract(
            vehicle_uid=vehicle_uid,
            customer_uid=customer_uid,
            sign_datetime=self.clock.now(),
            loc_begin_datetime=loc_begin,
            loc_end_datetime=loc_end,
            price=price,
        )
        with LogContext.bind(customer_uid=customer_uid, vehicle_uid=vehicle_uid):
            contract_id = self.contracts.create(contract)
            logger.info("contract_signed", extra={"contract_id": contract_id})
        return self.contracts.find_by_id(contract_id)

    def return_vehicle(self, contract_id: int) -> ReturnOutcome:
        """
        Record that the vehicle of ``contract_id`` came back now.

        Raises:
            ContractNotFoundError: unknown contract.
            ContractAlreadyReturnedError: the return was already recorded.
        """
        with LogContext.bind(contract_id=str(contract_id)):
            contract = self.contracts.find_by_id(contract_id)
            if contract is None:
                raise ContractNotFoundError(contract_id)
            if contract.returning_datetime is not None:
                raise ContractAlreadyReturnedError(
                    contract_id, contract.returning_datetime.isoformat()
                )

            now = self.clock.now()
            if not self.contracts.mark_returned(contract_id, now):
                # Deleted between the read and the update.
                raise ContractNotFoundError(contract_id)

            returned = self.contracts.find_by_id(contract_id)
            overdue = is_overdue(returned, now)
            minutes = overdue_minutes(returned) if is_returned_late(returned) else None

            if overdue:
                logger.warning(
                    "vehicle_returned_late",
                    extra={"overdue_minutes": minutes},
                )
            else:
                logger.info("vehicle_returned")

        return ReturnOutcome(contract=returned, is_overdue=overdue, overdue_minutes=minutes)

    def record_payment(self, contract_id: int, amount: Decimal) -> PaymentStatus:
        """
        Record a payment and return the contract's new payment position.

        Raises:
            BillingContractNotFoundError: unknown contract.
        """
        with LogContext.bind(contract_id=str(contract_id)):
            self.billings.create(Billing(contract_id=contract_id, amount=amount))
            status = self.billings.payment_status(contract_id)
            logger.info(
                "payment_recorded",
                extra={
                    "amount": amount,
                    "total_paid": status.total_paid,
                    "outstanding": status.outstanding,
                    "is_fully_paid": status.is_fully_paid,
                },
            )
        return status
