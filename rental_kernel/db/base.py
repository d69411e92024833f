"""
Module: rental_kernel.db.base
Responsibility: Declarative base class for the rental ORM models and the
    type annotation map that keeps column types consistent.
Architecture position: Kernel > DB. Lowest-level import target within the
    kernel; model files import from here. MUST NOT import from models/,
    repositories/, domain/ or outer layers.

Invariants enforced:
    - Decimal maps to Numeric(10, 2): NEVER use float for money.
    - datetime maps to UTCDateTime: timestamps are UTC end to end.
    - int maps to Integer so autoincrement primary keys work on every
      backend (SQLite only aliases rowid for INTEGER).
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar

from sqlalchemy import Integer, Numeric, String
from sqlalchemy.orm import DeclarativeBase

from rental_kernel.db.types import MONEY_DECIMAL_PLACES, UTCDateTime


class Base(DeclarativeBase):
    """
    Declarative base for all rental models.

    Unlike document-store entities, relational rows use store-assigned
    integer ids; each model declares its own autoincrement primary key.
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(10, MONEY_DECIMAL_PLACES),
        datetime: UTCDateTime(),
        int: Integer,
        str: String(255),
    }
