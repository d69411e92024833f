"""
Module: rental_engines.overdue
Responsibility:
    Classify rental contracts as overdue and measure how late a returned
    vehicle came back.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import rental_kernel.domain.

Invariants enforced:
    - Purity: no clock access, no logging. ``now`` is always an argument.
    - A contract is overdue iff
        (a) it is not returned and ``now > loc_end_datetime + GRACE_PERIOD``, or
        (b) it is returned and ``returning_datetime > loc_end_datetime + GRACE_PERIOD``.
    - Branch (b) never looks at ``now``: a vehicle returned within the grace
      period is never overdue, however much time has passed since.
    - The store-side predicates in
      ``rental_kernel.repositories.predicates`` are derived from
      GRACE_PERIOD and must classify every contract the same way.

Failure modes:
    - ValueError from ``overdue_minutes`` when the contract is not returned
      late (the duration is only defined for branch (b)).
    - TypeError when ``now`` is naive (cannot be compared to UTC timestamps).

Usage:
    from rental_engines.overdue import is_overdue, overdue_minutes

    if is_overdue(contract, clock.now()):
        ...
    if is_returned_late(contract):
        delay = overdue_minutes(contract)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from rental_kernel.domain.values import Contract

# Tolerance after loc_end_datetime before a rental counts as late.
GRACE_PERIOD = timedelta(hours=1)

GRACE_PERIOD_SECONDS = int(GRACE_PERIOD.total_seconds())


def overdue_deadline(contract: Contract) -> datetime:
    """Latest return time that is still on time."""
    return contract.loc_end_datetime + GRACE_PERIOD


def is_returned_late(contract: Contract) -> bool:
    """Branch (b): returned, and after the end of the grace period."""
    if contract.returning_datetime is None:
        return False
    return contract.returning_datetime > overdue_deadline(contract)


def is_overdue(contract: Contract, now: datetime) -> bool:
    """
    Two-branch overdue predicate.

    Args:
        contract: Contract to classify.
        now: Evaluation time (aware). Only used while the vehicle is out.
    """
    if contract.returning_datetime is None:
        return now > overdue_deadline(contract)
    return is_returned_late(contract)


def overdue_minutes(contract: Contract) -> int:
    """
    Whole minutes between loc_end_datetime and returning_datetime.

    Only defined for contracts returned late; the delay of a vehicle still
    out is open-ended and is reported through ``is_overdue`` instead.

    Raises:
        ValueError: if the contract is not returned, or returned in time.
    """
    if contract.returning_datetime is None:
        raise ValueError(
            f"Contract {contract.id} is not returned; overdue duration is undefined"
        )
    if not is_returned_late(contract):
        raise ValueError(f"Contract {contract.id} was returned on time")
    delay = contract.returning_datetime - contract.loc_end_datetime
    return int(delay // timedelta(minutes=1))


def select_overdue(contracts: Iterable[Contract], now: datetime) -> list[Contract]:
    """Filter ``contracts`` down to the overdue ones, preserving order."""
    return [c for c in contracts if is_overdue(c, now)]
