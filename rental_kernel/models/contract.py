"""
Module: rental_kernel.models.contract
Responsibility: ORM persistence for rental contracts.
Architecture position: Kernel > Models. May import from db/ only.

Invariants enforced:
    - returning_datetime is NULL while the vehicle is out.
    - price is DECIMAL(10,2).
    - loc_begin <= loc_end is enforced by the Contract value type before a
      row is written (and by a CHECK constraint).

Failure modes:
    - IntegrityError when deleting a contract still referenced by billing
      rows (no cascade).
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from rental_kernel.db.base import Base
from rental_kernel.db.types import MONEY_DECIMAL_PLACES


class ContractModel(Base):
    """Row of the ``contract`` table."""

    __tablename__ = "contract"

    __table_args__ = (
        CheckConstraint(
            "loc_begin_datetime <= loc_end_datetime",
            name="ck_contract_loc_window",
        ),
        CheckConstraint("price >= 0", name="ck_contract_price_non_negative"),
        Index("idx_contract_customer", "customer_uid"),
        Index("idx_contract_vehicle", "vehicle_uid"),
        Index("idx_contract_loc_end", "loc_end_datetime"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    vehicle_uid: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_uid: Mapped[str] = mapped_column(String(255), nullable=False)

    sign_datetime: Mapped[datetime] = mapped_column(nullable=False)
    loc_begin_datetime: Mapped[datetime] = mapped_column(nullable=False)
    loc_end_datetime: Mapped[datetime] = mapped_column(nullable=False)
    returning_datetime: Mapped[datetime | None] = mapped_column(nullable=True)

    price: Mapped[Decimal] = mapped_column(
        Numeric(10, MONEY_DECIMAL_PLACES),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<ContractModel {self.id} vehicle={self.vehicle_uid} "
            f"customer={self.customer_uid} price={self.price}>"
        )
