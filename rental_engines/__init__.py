"""
Module: rental_engines
Responsibility:
    Package entrypoint re-exporting the pure rental rules: overdue
    classification and payment sufficiency.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import rental_kernel.domain. MUST NOT import repositories or
    services.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()``; callers pass ``now``.
    - Decimal-only arithmetic for money.
    - Determinism: identical inputs always produce identical outputs.
    - Engines never log or swallow errors; they only classify.
"""

from rental_engines.overdue import (
    GRACE_PERIOD,
    GRACE_PERIOD_SECONDS,
    is_overdue,
    is_returned_late,
    overdue_deadline,
    overdue_minutes,
    select_overdue,
)
from rental_engines.payment import (
    PaymentStatus,
    evaluate_payment,
    is_fully_paid,
    outstanding_balance,
    total_paid,
)

__all__ = [
    "GRACE_PERIOD",
    "GRACE_PERIOD_SECONDS",
    "is_overdue",
    "is_returned_late",
    "overdue_deadline",
    "overdue_minutes",
    "select_overdue",
    "PaymentStatus",
    "evaluate_payment",
    "is_fully_paid",
    "outstanding_balance",
    "total_paid",
]
