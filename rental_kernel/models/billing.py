"""
Module: rental_kernel.models.billing
Responsibility: ORM persistence for payments recorded against contracts.
Architecture position: Kernel > Models. May import from db/ only.

Invariants enforced:
    - contract_id is a foreign key to contract.id; the store rejects
      billing rows for unknown contracts.
    - No ON DELETE CASCADE: billing rows are never removed implicitly.
"""

from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from rental_kernel.db.base import Base
from rental_kernel.db.types import MONEY_DECIMAL_PLACES


class BillingModel(Base):
    """Row of the ``billing`` table."""

    __tablename__ = "billing"

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_billing_amount_non_negative"),
        Index("idx_billing_contract", "contract_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    contract_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("contract.id", name="fk_billing_contract"),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, MONEY_DECIMAL_PLACES),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<BillingModel {self.id} contract={self.contract_id} amount={self.amount}>"
