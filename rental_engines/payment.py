"""
Module: rental_engines.payment
Responsibility:
    Decide whether the payments recorded against a contract cover its price.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Decimal-only arithmetic.
    - A contract is fully paid iff the sum of its billing amounts is
      >= its price. No billing rows means a total of zero.
    - Whether the contract exists is the caller's concern: the billing
      repository raises ContractNotFoundError before this module is reached.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from rental_kernel.domain.values import Billing, Contract

ZERO = Decimal("0")


@dataclass(frozen=True)
class PaymentStatus:
    """
    Payment position of one contract at query time.

    Guarantees:
        - outstanding == max(price - total_paid, 0).
        - is_fully_paid == (total_paid >= price).
    """

    contract_id: int | None
    price: Decimal
    total_paid: Decimal
    outstanding: Decimal
    is_fully_paid: bool

    @property
    def overpaid(self) -> Decimal:
        """Amount paid beyond the price (0 if none)."""
        return max(self.total_paid - self.price, ZERO)


def total_paid(billings: Iterable[Billing]) -> Decimal:
    """Sum of billing amounts; zero for an empty set."""
    return sum((b.amount for b in billings), ZERO)


def is_fully_paid(contract: Contract, total_paid: Decimal) -> bool:
    """True iff ``total_paid`` covers ``contract.price``."""
    return total_paid >= contract.price


def outstanding_balance(contract: Contract, total_paid: Decimal) -> Decimal:
    """What is still owed on the contract, never negative."""
    return max(contract.price - total_paid, ZERO)


def evaluate_payment(contract: Contract, total_paid: Decimal) -> PaymentStatus:
    """Build the PaymentStatus for ``contract`` given its summed payments."""
    return PaymentStatus(
        contract_id=contract.id,
        price=contract.price,
        total_paid=total_paid,
        outstanding=outstanding_balance(contract, total_paid),
        is_fully_paid=is_fully_paid(contract, total_paid),
    )
