"""
Store-side rental predicates.

The overdue rules of ``rental_engines.overdue`` expressed as SQLAlchemy
clauses, so the reports can run as aggregate queries in the database. Both
sides read the grace period from the same constant; a contract must be
classified identically by ``is_overdue`` and by ``overdue_clause``.

Invariants:
- overdue_clause(now) <=> rental_engines.overdue.is_overdue(contract, now)
- returned_late_clause() <=> rental_engines.overdue.is_returned_late(contract)
- overdue_minutes_expr() == rental_engines.overdue.overdue_minutes(contract)
  on every row matching returned_late_clause()
"""

from datetime import datetime

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from rental_engines.overdue import GRACE_PERIOD, GRACE_PERIOD_SECONDS
from rental_kernel.db.functions import minutes_between, seconds_between
from rental_kernel.models.contract import ContractModel


def returned_late_clause() -> ColumnElement[bool]:
    """Returned, and later than loc_end_datetime + grace period."""
    return and_(
        ContractModel.returning_datetime.is_not(None),
        seconds_between(
            ContractModel.loc_end_datetime,
            ContractModel.returning_datetime,
        ) > GRACE_PERIOD_SECONDS,
    )


def not_returned_overdue_clause(now: datetime) -> ColumnElement[bool]:
    """Still out, and ``now`` is past loc_end_datetime + grace period."""
    # now > loc_end + G  <=>  loc_end < now - G
    return and_(
        ContractModel.returning_datetime.is_(None),
        ContractModel.loc_end_datetime < now - GRACE_PERIOD,
    )


def overdue_clause(now: datetime) -> ColumnElement[bool]:
    """Full two-branch overdue predicate."""
    return or_(not_returned_overdue_clause(now), returned_late_clause())


def ongoing_clause(now: datetime) -> ColumnElement[bool]:
    """Rental window contains ``now`` and the vehicle is still out."""
    return and_(
        ContractModel.loc_begin_datetime <= now,
        ContractModel.loc_end_datetime >= now,
        ContractModel.returning_datetime.is_(None),
    )


def overdue_minutes_expr() -> ColumnElement[int]:
    """Whole minutes between loc_end_datetime and returning_datetime."""
    return minutes_between(
        ContractModel.loc_end_datetime,
        ContractModel.returning_datetime,
    )
