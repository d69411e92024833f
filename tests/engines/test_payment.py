"""
Tests for payment sufficiency.

Covers:
- Summing billing amounts
- Fully-paid boundary (>= price)
- Outstanding balance and overpayment
"""

from decimal import Decimal

from rental_engines.payment import (
    ZERO,
    PaymentStatus,
    evaluate_payment,
    is_fully_paid,
    outstanding_balance,
    total_paid,
)
from rental_kernel.domain.values import Billing


def _billings(*amounts: str) -> list[Billing]:
    return [Billing(contract_id=1, amount=Decimal(a)) for a in amounts]


class TestTotalPaid:
    def test_sum_of_amounts(self):
        assert total_paid(_billings("120.00", "380.00")) == Decimal("500.00")

    def test_no_billings_is_zero(self):
        assert total_paid([]) == ZERO

    def test_cents_are_exact(self):
        assert total_paid(_billings("0.10", "0.20")) == Decimal("0.30")


class TestIsFullyPaid:
    def test_exact_payment_is_fully_paid(self, contract_factory):
        contract = contract_factory(price="500.00")

        assert is_fully_paid(contract, total_paid(_billings("120.00", "380.00"))) is True

    def test_one_cent_short_is_not_paid(self, contract_factory):
        contract = contract_factory(price="500.00")

        assert is_fully_paid(contract, total_paid(_billings("120.00", "379.99"))) is False

    def test_no_payment_is_unpaid(self, contract_factory):
        assert is_fully_paid(contract_factory(price="100"), ZERO) is False

    def test_zero_price_is_paid_without_billing(self, contract_factory):
        assert is_fully_paid(contract_factory(price="0"), ZERO) is True


class TestEvaluatePayment:
    def test_partial_payment(self, contract_factory):
        contract = contract_factory(price="500.00").with_id(7)

        status = evaluate_payment(contract, Decimal("120.00"))

        assert status == PaymentStatus(
            contract_id=7,
            price=Decimal("500.00"),
            total_paid=Decimal("120.00"),
            outstanding=Decimal("380.00"),
            is_fully_paid=False,
        )
        assert status.overpaid == ZERO

    def test_overpayment(self, contract_factory):
        contract = contract_factory(price="100.00")

        status = evaluate_payment(contract, Decimal("130.00"))

        assert status.is_fully_paid is True
        assert status.outstanding == ZERO
        assert status.overpaid == Decimal("30.00")

    def test_outstanding_never_negative(self, contract_factory):
        contract = contract_factory(price="10.00")

        assert outstanding_balance(contract, Decimal("25.00")) == ZERO
