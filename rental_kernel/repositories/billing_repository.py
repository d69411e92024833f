"""
BillingRepository -- payments recorded against contracts.

Responsibility:
    CRUD on the ``billing`` table and the payment reconciliation queries:
    total paid per contract, fully-paid checks and the unpaid listing.

Architecture position:
    Kernel > Repositories -- imperative shell over the relational store.
    The sufficiency decision itself is ``rental_engines.payment``.

Invariants enforced:
    - A billing row always references an existing contract (foreign key).
    - Sums are computed in the store with COALESCE(SUM(amount), 0): a
      contract with no billing rows has paid exactly zero.
    - Reconciliation against an unknown contract id raises; it is never
      reported as paid or unpaid.

Failure modes:
    - BillingContractNotFoundError: create/update with an unknown contract.
    - ContractNotFoundError: total_paid / is_contract_fully_paid /
      payment_status on an unknown contract.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError

from rental_engines.payment import PaymentStatus, evaluate_payment
from rental_kernel.db.types import MONEY_DECIMAL_PLACES, round_money, to_decimal
from rental_kernel.domain.values import Billing, Contract
from rental_kernel.exceptions import (
    BillingContractNotFoundError,
    ContractNotFoundError,
    InvalidBillingError,
)
from rental_kernel.logging_config import get_logger
from rental_kernel.models.billing import BillingModel
from rental_kernel.models.contract import ContractModel
from rental_kernel.repositories.base import BaseRepository
from rental_kernel.repositories.contract_repository import contract_from_model

logger = get_logger("repositories.billing")


def billing_from_model(model: BillingModel) -> Billing:
    return Billing(id=model.id, contract_id=model.contract_id, amount=model.amount)


def _paid_expr():
    return func.coalesce(func.sum(BillingModel.amount), 0)


class BillingRepository(BaseRepository[BillingModel]):
    """
    Repository for billing rows and payment reconciliation.

    Guarantees:
        - Returns Billing / Contract / PaymentStatus values.
        - Amounts read from aggregates are Decimals rounded to the money
          precision of the schema.
    """

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create(self, billing: Billing) -> int:
        """
        Record a payment.

        Returns:
            The assigned billing id.
        Raises:
            BillingContractNotFoundError: ``billing.contract_id`` is unknown.
        """
        if billing.id is not None:
            raise InvalidBillingError(
                f"cannot create a billing that already has id {billing.id}"
            )
        try:
            with self._session() as session:
                model = BillingModel(
                    contract_id=billing.contract_id,
                    amount=billing.amount,
                )
                session.add(model)
                session.flush()
                billing_id = model.id
        except IntegrityError as exc:
            raise BillingContractNotFoundError(billing.contract_id) from exc

        logger.info(
            "billing_created",
            extra={
                "billing_id": billing_id,
                "contract_id": billing.contract_id,
                "amount": billing.amount,
            },
        )
        return billing_id

    def update(self, billing: Billing) -> bool:
        """Overwrite a billing row. False if ``billing.id`` is unknown."""
        if billing.id is None:
            raise InvalidBillingError("cannot update a billing without an id")
        stmt = (
            update(BillingModel)
            .where(BillingModel.id == billing.id)
            .values(contract_id=billing.contract_id, amount=billing.amount)
        )
        try:
            with self._session() as session:
                affected = session.execute(stmt).rowcount > 0
        except IntegrityError as exc:
            raise BillingContractNotFoundError(billing.contract_id) from exc

        logger.info(
            "billing_updated" if affected else "billing_update_noop",
            extra={"billing_id": billing.id, "contract_id": billing.contract_id},
        )
        return affected

    def delete(self, billing_id: int) -> bool:
        """Delete a billing row. False if it does not exist."""
        stmt = delete(BillingModel).where(BillingModel.id == billing_id)
        with self._session() as session:
            affected = session.execute(stmt).rowcount > 0

        logger.info(
            "billing_deleted" if affected else "billing_delete_noop",
            extra={"billing_id": billing_id},
        )
        return affected

    def find_by_id(self, billing_id: int) -> Billing | None:
        with self._session() as session:
            model = session.get(BillingModel, billing_id)
            return billing_from_model(model) if model is not None else None

    def list_by_contract(self, contract_id: int) -> list[Billing]:
        """Billing rows of one contract, ordered by id."""
        stmt = (
            select(BillingModel)
            .where(BillingModel.contract_id == contract_id)
            .order_by(BillingModel.id)
        )
        with self._session() as session:
            return [billing_from_model(m) for m in session.scalars(stmt)]

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def _contract_totals(self):
        """Contracts outer-joined to billing, one row per contract with its sum."""
        return (
            select(ContractModel, _paid_expr().label("total_paid"))
            .outerjoin(BillingModel, BillingModel.contract_id == ContractModel.id)
            .group_by(ContractModel.id)
        )

    def _contract_and_total(self, contract_id: int) -> tuple[Contract, Decimal]:
        stmt = self._contract_totals().where(ContractModel.id == contract_id)
        with self._session() as session:
            row = session.execute(stmt).one_or_none()
            contract = contract_from_model(row[0]) if row is not None else None
        if contract is None:
            logger.warning(
                "reconciliation_unknown_contract",
                extra={"contract_id": contract_id},
            )
            raise ContractNotFoundError(contract_id)
        return contract, round_money(to_decimal(row.total_paid))

    def total_paid(self, contract_id: int) -> Decimal:
        """Sum of the payments recorded for ``contract_id`` (0 if none)."""
        _, paid = self._contract_and_total(contract_id)
        return paid

    def payment_status(self, contract_id: int) -> PaymentStatus:
        """Price, total paid and outstanding balance of one contract."""
        contract, paid = self._contract_and_total(contract_id)
        return evaluate_payment(contract, paid)

    def is_contract_fully_paid(self, contract_id: int) -> bool:
        """
        True iff the payments recorded for the contract cover its price.

        Raises:
            ContractNotFoundError: no contract has ``contract_id``.
        """
        return self.payment_status(contract_id).is_fully_paid

    def _unpaid_rows(self):
        # Round before comparing: SQLite sums NUMERIC columns as REAL.
        stmt = (
            self._contract_totals()
            .having(func.round(_paid_expr(), MONEY_DECIMAL_PLACES) < ContractModel.price)
            .order_by(ContractModel.id)
        )
        with self._session() as session:
            return [
                (contract_from_model(row[0]), round_money(to_decimal(row.total_paid)))
                for row in session.execute(stmt)
            ]

    def list_unpaid_contracts(self) -> list[Contract]:
        """Contracts whose payments do not cover the price, including those with none."""
        return [contract for contract, _ in self._unpaid_rows()]

    def list_unpaid_statuses(self) -> list[PaymentStatus]:
        """PaymentStatus of every unpaid contract, ordered by contract id."""
        return [evaluate_payment(contract, paid) for contract, paid in self._unpaid_rows()]
