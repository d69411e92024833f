"""
Module: rental_kernel.repositories.base
Responsibility: Abstract base for the relational repositories. Each
    repository owns a session factory and runs every public call inside its
    own ``session_scope``: the pooled connection is acquired at the start of
    the call and released at the end, on success or failure.
Architecture position: Kernel > Repositories. May import from db/, models/,
    domain/ and the pure rules in rental_engines. MUST NOT import services.

Invariants enforced:
    - Repositories return domain values (Contract, Billing, PaymentStatus),
      never ORM instances.
    - Not-found is an empty result (None, [], False), not an exception.

Failure modes:
    - Store errors propagate after session_scope has rolled back.
"""

from abc import ABC
from contextlib import AbstractContextManager
from decimal import Decimal
from typing import Generic, TypeVar

from sqlalchemy.orm import Session, sessionmaker

from rental_kernel.db.base import Base
from rental_kernel.db.engine import session_scope
from rental_kernel.db.types import DEFAULT_ROUNDING, to_decimal

ModelType = TypeVar("ModelType", bound=Base)

AVERAGE_DECIMAL_PLACES = 2


def round_average(value) -> Decimal | None:
    """Normalize an AVG() result to a Decimal with two places (None stays None)."""
    value = to_decimal(value)
    if value is None:
        return None
    return value.quantize(Decimal(10) ** -AVERAGE_DECIMAL_PLACES, rounding=DEFAULT_ROUNDING)


class BaseRepository(ABC, Generic[ModelType]):
    """
    Abstract base class for relational repositories.

    Contract:
        Accepts a session factory at construction; every operation opens
        a scoped session through ``_session()``.

    Non-goals:
        - No cross-call transactions. Callers needing several operations in
          one transaction use ``session_scope`` and the ORM directly.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self.session_factory = session_factory

    def _session(self) -> AbstractContextManager[Session]:
        return session_scope(self.session_factory)
