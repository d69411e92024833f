"""
Values -- Immutable, self-validating rental domain objects.

Responsibility:
    Contract and Billing (relational store) and Customer and Vehicle
    (document store) value types. Each type validates itself on construction.
    Documents have one explicit deserializer (``from_document``); relational
    rows are converted by their repository. There is no reflective field
    hydration.

Architecture position:
    Kernel > Domain -- pure, zero I/O. Imported by the rules engine, the
    repositories and the services.

Invariants enforced:
    - loc_begin_datetime <= loc_end_datetime.
    - price >= 0, amount >= 0, km >= 0 (Decimal, never float, for money).
    - Money fits DECIMAL(10,2): at most two decimal places, at most
      MAX_MONEY.
    - All timestamps are timezone-aware and normalized to UTC.
    - ``id`` is None until the store assigns one; ``returning_datetime`` is
      None until the vehicle comes back.

Failure modes:
    - InvalidContractError / InvalidBillingError on violated invariants.
    - ValueError for Customer / Vehicle field errors.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from rental_kernel.exceptions import InvalidBillingError, InvalidContractError

MONEY_QUANTUM = Decimal("0.01")
MAX_MONEY = Decimal("99999999.99")


def to_utc(value: datetime, field_name: str) -> datetime:
    """Normalize an aware datetime to UTC; naive datetimes are rejected."""
    if not isinstance(value, datetime):
        raise TypeError(f"{field_name} must be a datetime, got {type(value).__name__}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{field_name} must be timezone-aware")
    return value.astimezone(timezone.utc)


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # Stores without native DECIMAL hand back floats; go through str
        # so 379.99 stays 379.99.
        return Decimal(str(value))
    return Decimal(value)


def to_money(value: Any, field_name: str) -> Decimal:
    """
    Coerce ``value`` to a Decimal the DECIMAL(10,2) columns hold exactly.

    Raises:
        ValueError: not a number, not finite, negative, finer than a cent,
            or above MAX_MONEY.
    """
    try:
        amount = _to_decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValueError(f"invalid {field_name} {value!r}") from e
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"{field_name} must be >= 0, got {amount}")
    if amount > MAX_MONEY:
        raise ValueError(f"{field_name} must be <= {MAX_MONEY}, got {amount}")
    if amount.quantize(MONEY_QUANTUM) != amount:
        raise ValueError(f"{field_name} has sub-cent precision: {amount}")
    return amount


@dataclass(frozen=True, slots=True)
class Contract:
    """
    A rental contract.

    Contract:
        Binds a vehicle and a customer to a rental window and a price.

    Guarantees:
        - Immutable; amendments produce a new instance (``with_returning``,
          ``dataclasses.replace``).
        - Timestamps are aware UTC datetimes.
        - price is a non-negative Decimal with at most two decimal places.

    Non-goals:
        - Does NOT know whether it is overdue or paid; that is the rules
          engine's job (``rental_engines``).
    """

    vehicle_uid: str
    customer_uid: str
    sign_datetime: datetime
    loc_begin_datetime: datetime
    loc_end_datetime: datetime
    price: Decimal
    returning_datetime: datetime | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        if not self.vehicle_uid:
            raise InvalidContractError("vehicle_uid is required")
        if not self.customer_uid:
            raise InvalidContractError("customer_uid is required")

        try:
            for name in ("sign_datetime", "loc_begin_datetime", "loc_end_datetime"):
                object.__setattr__(self, name, to_utc(getattr(self, name), name))
            if self.returning_datetime is not None:
                object.__setattr__(
                    self,
                    "returning_datetime",
                    to_utc(self.returning_datetime, "returning_datetime"),
                )
        except (TypeError, ValueError) as e:
            raise InvalidContractError(str(e)) from e

        if self.loc_begin_datetime > self.loc_end_datetime:
            raise InvalidContractError(
                "loc_begin_datetime must not be after loc_end_datetime"
            )

        try:
            object.__setattr__(self, "price", to_money(self.price, "price"))
        except ValueError as e:
            raise InvalidContractError(str(e)) from e

    @property
    def is_returned(self) -> bool:
        return self.returning_datetime is not None

    def with_id(self, contract_id: int) -> Contract:
        return replace(self, id=contract_id)

    def with_returning(self, returning_datetime: datetime) -> Contract:
        """Return a copy marked as returned at ``returning_datetime``."""
        return replace(self, returning_datetime=returning_datetime)


@dataclass(frozen=True, slots=True)
class Billing:
    """
    A single payment recorded against a contract.

    Guarantees:
        - contract_id is always set; amount is a non-negative Decimal
          with at most two decimal places.
    """

    contract_id: int
    amount: Decimal
    id: int | None = None

    def __post_init__(self) -> None:
        if self.contract_id is None:
            raise InvalidBillingError("contract_id is required")
        try:
            object.__setattr__(self, "amount", to_money(self.amount, "amount"))
        except ValueError as e:
            raise InvalidBillingError(str(e)) from e

    def with_id(self, billing_id: int) -> Billing:
        return replace(self, id=billing_id)


@dataclass(frozen=True, slots=True)
class Customer:
    """A customer document, keyed by application-assigned ``uid``."""

    uid: str
    first_name: str
    second_name: str
    address: str
    permit_number: str

    def __post_init__(self) -> None:
        if not self.uid:
            raise ValueError("Customer uid is required")

    def to_document(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "first_name": self.first_name,
            "second_name": self.second_name,
            "address": self.address,
            "permit_number": self.permit_number,
        }

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> Customer:
        return cls(
            uid=document["uid"],
            first_name=document["first_name"],
            second_name=document["second_name"],
            address=document["address"],
            permit_number=document["permit_number"],
        )


@dataclass(frozen=True, slots=True)
class Vehicle:
    """A vehicle document, keyed by application-assigned ``uid``."""

    uid: str
    licence_plate: str
    informations: str
    km: int

    def __post_init__(self) -> None:
        if not self.uid:
            raise ValueError("Vehicle uid is required")
        if not isinstance(self.km, int) or self.km < 0:
            raise ValueError(f"Vehicle km must be a non-negative int, got {self.km!r}")

    def to_document(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "licence_plate": self.licence_plate,
            "informations": self.informations,
            "km": self.km,
        }

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> Vehicle:
        return cls(
            uid=document["uid"],
            licence_plate=document["licence_plate"],
            informations=document["informations"],
            km=int(document["km"]),
        )
