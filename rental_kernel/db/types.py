"""
Module: rental_kernel.db.types
Responsibility: Column types shared by every rental model. Centralizes the
    monetary precision of the schema (DECIMAL(10,2)) and the UTC timestamp
    convention so models and repositories agree on both.
Architecture position: Kernel > DB. MUST NOT import from models/,
    repositories/ or domain/.

Invariants enforced:
    - Money columns are Numeric(10, 2); Python values are Decimal, never float.
    - Timestamps are stored as naive UTC and returned as aware UTC.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime stored as naive UTC.

    Contract:
        - process_bind_param: aware datetime -> naive UTC. Naive input is
          taken to be UTC already.
        - process_result_value: naive value -> aware UTC.

    Keeping the column naive means every backend (including SQLite) stores
    and compares the same wall-clock representation.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, str):
            value = datetime.fromisoformat(value)
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def truncate_to_second(value: datetime | None) -> datetime | None:
    """Drop sub-second precision, matching the DATETIME column resolution."""
    if value is None:
        return None
    return value.replace(microsecond=0)


def round_money(value: Decimal, decimal_places: int = MONEY_DECIMAL_PLACES) -> Decimal:
    """
    Round a monetary value to the schema precision.

    This is the only rounding function applied to amounts read back from
    aggregate queries (SUM, AVG).
    """
    quantizer = Decimal(10) ** -decimal_places
    return value.quantize(quantizer, rounding=DEFAULT_ROUNDING)


def to_decimal(value) -> Decimal | None:
    """Coerce an aggregate result (int, float, Decimal, None) to Decimal."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
