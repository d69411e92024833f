"""
ContractRepository -- persistence and queries over rental contracts.

Responsibility:
    CRUD on the ``contract`` table plus the lifecycle and reporting queries:
    per-customer / per-vehicle listings and groupings, ongoing rentals,
    overdue rentals and the overdue aggregates.

Architecture position:
    Kernel > Repositories -- imperative shell over the relational store.

Invariants enforced:
    - Every overdue query is built from ``repositories.predicates`` and
      therefore agrees with ``rental_engines.overdue``.
    - Timestamps are written with one-second precision (the DATETIME
      resolution of the schema); values read back are aware UTC.
    - update/delete report "no row" as False, never as an error.
    - Listings are ordered by id.

Failure modes:
    - ContractReferencedError: delete blocked by billing rows.
    - InvalidContractError: create with an id, update without one.
    - ValueError: count_overdue_between with start > end.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError

from rental_kernel.db.types import truncate_to_second
from rental_kernel.domain.clock import Clock, SystemClock
from rental_kernel.domain.values import Contract
from rental_kernel.exceptions import ContractReferencedError, InvalidContractError
from rental_kernel.logging_config import get_logger
from rental_kernel.models.contract import ContractModel
from rental_kernel.repositories.base import BaseRepository, round_average
from rental_kernel.repositories.predicates import (
    ongoing_clause,
    overdue_clause,
    overdue_minutes_expr,
    returned_late_clause,
)

logger = get_logger("repositories.contract")


def contract_from_model(model: ContractModel) -> Contract:
    """Convert an ORM row to a Contract value."""
    return Contract(
        id=model.id,
        vehicle_uid=model.vehicle_uid,
        customer_uid=model.customer_uid,
        sign_datetime=model.sign_datetime,
        loc_begin_datetime=model.loc_begin_datetime,
        loc_end_datetime=model.loc_end_datetime,
        returning_datetime=model.returning_datetime,
        price=model.price,
    )


def _column_values(contract: Contract) -> dict:
    return {
        "vehicle_uid": contract.vehicle_uid,
        "customer_uid": contract.customer_uid,
        "sign_datetime": truncate_to_second(contract.sign_datetime),
        "loc_begin_datetime": truncate_to_second(contract.loc_begin_datetime),
        "loc_end_datetime": truncate_to_second(contract.loc_end_datetime),
        "returning_datetime": truncate_to_second(contract.returning_datetime),
        "price": contract.price,
    }


class ContractRepository(BaseRepository[ContractModel]):
    """
    Repository for rental contracts.

    Contract:
        Takes a session factory and a Clock. ``now``-dependent queries
        (ongoing, overdue) use the clock unless the caller passes ``now``.

    Guarantees:
        - Returns Contract values, never ORM entities.
        - Each call is its own transaction.
    """

    def __init__(self, session_factory, clock: Clock | None = None):
        super().__init__(session_factory)
        self.clock = clock or SystemClock()

    def _now(self, now: datetime | None) -> datetime:
        return now if now is not None else self.clock.now()

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create(self, contract: Contract) -> int:
        """
        Insert a new contract.

        Preconditions:
            - ``contract.id`` is None (the store assigns it).
        Returns:
            The assigned id.
        """
        if contract.id is not None:
            raise InvalidContractError(
                f"cannot create a contract that already has id {contract.id}"
            )
        with self._session() as session:
            model = ContractModel(**_column_values(contract))
            session.add(model)
            session.flush()
            contract_id = model.id

        logger.info(
            "contract_created",
            extra={
                "contract_id": contract_id,
                "vehicle_uid": contract.vehicle_uid,
                "customer_uid": contract.customer_uid,
                "price": contract.price,
            },
        )
        return contract_id

    def update(self, contract: Contract) -> bool:
        """
        Overwrite every field of the contract with ``contract.id``.

        Returns:
            True if a row was updated, False if no contract has that id.
        """
        if contract.id is None:
            raise InvalidContractError("cannot update a contract without an id")
        stmt = (
            update(ContractModel)
            .where(ContractModel.id == contract.id)
            .values(**_column_values(contract))
        )
        with self._session() as session:
            affected = session.execute(stmt).rowcount > 0

        logger.info(
            "contract_updated" if affected else "contract_update_noop",
            extra={"contract_id": contract.id},
        )
        return affected

    def delete(self, contract_id: int) -> bool:
        """
        Delete a contract.

        Returns:
            True if a row was deleted, False if no contract has that id.
        Raises:
            ContractReferencedError: billing rows still reference it.
        """
        stmt = delete(ContractModel).where(ContractModel.id == contract_id)
        try:
            with self._session() as session:
                affected = session.execute(stmt).rowcount > 0
        except IntegrityError as exc:
            raise ContractReferencedError(contract_id) from exc

        logger.info(
            "contract_deleted" if affected else "contract_delete_noop",
            extra={"contract_id": contract_id},
        )
        return affected

    def find_by_id(self, contract_id: int) -> Contract | None:
        """Contract with ``contract_id``, or None."""
        with self._session() as session:
            model = session.get(ContractModel, contract_id)
            return contract_from_model(model) if model is not None else None

    def mark_returned(self, contract_id: int, returning_datetime: datetime) -> bool:
        """
        Record the vehicle return for a contract.

        Returns:
            True if the contract exists and was updated.
        """
        stmt = (
            update(ContractModel)
            .where(ContractModel.id == contract_id)
            .values(returning_datetime=truncate_to_second(returning_datetime))
        )
        with self._session() as session:
            affected = session.execute(stmt).rowcount > 0

        if affected:
            logger.info(
                "contract_returned",
                extra={"contract_id": contract_id, "returning_datetime": returning_datetime},
            )
        return affected

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def _list(self, *criteria) -> list[Contract]:
        stmt = select(ContractModel).where(*criteria).order_by(ContractModel.id)
        with self._session() as session:
            return [contract_from_model(m) for m in session.scalars(stmt)]

    def list_by_customer(self, customer_uid: str) -> list[Contract]:
        return self._list(ContractModel.customer_uid == customer_uid)

    def list_by_vehicle(self, vehicle_uid: str) -> list[Contract]:
        return self._list(ContractModel.vehicle_uid == vehicle_uid)

    def _group_by(self, column) -> dict[str, list[Contract]]:
        # One pass over the whole table; fine at back-office scale.
        stmt = select(ContractModel).order_by(column, ContractModel.id)
        grouped: dict[str, list[Contract]] = {}
        with self._session() as session:
            for model in session.scalars(stmt):
                contract = contract_from_model(model)
                grouped.setdefault(getattr(contract, column.key), []).append(contract)
        return grouped

    def group_by_vehicle(self) -> dict[str, list[Contract]]:
        """All contracts keyed by vehicle uid, each list ordered by id."""
        return self._group_by(ContractModel.vehicle_uid)

    def group_by_customer(self) -> dict[str, list[Contract]]:
        """All contracts keyed by customer uid, each list ordered by id."""
        return self._group_by(ContractModel.customer_uid)

    def list_ongoing_for_customer(
        self,
        customer_uid: str,
        now: datetime | None = None,
    ) -> list[Contract]:
        """Rentals of ``customer_uid`` whose window contains now and not yet returned."""
        return self._list(
            ContractModel.customer_uid == customer_uid,
            ongoing_clause(self._now(now)),
        )

    def list_overdue(self, now: datetime | None = None) -> list[Contract]:
        """All overdue contracts (returned late, or still out past the grace period)."""
        return self._list(overdue_clause(self._now(now)))

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def count_overdue_between(
        self,
        start: datetime,
        end: datetime,
        now: datetime | None = None,
    ) -> int:
        """
        Number of overdue contracts whose loc_end_datetime is in [start, end].

        The date range restricts both overdue branches.
        """
        if start > end:
            raise ValueError("start must not be after end")
        stmt = (
            select(func.count())
            .select_from(ContractModel)
            .where(
                overdue_clause(self._now(now)),
                ContractModel.loc_end_datetime.between(start, end),
            )
        )
        with self._session() as session:
            return int(session.execute(stmt).scalar_one())

    def average_overdue_count_per_customer(
        self,
        now: datetime | None = None,
    ) -> Decimal | None:
        """
        Mean number of overdue contracts per customer, over the customers
        that have at least one. None when nobody is overdue.
        """
        per_customer = (
            select(
                ContractModel.customer_uid,
                func.count().label("overdue_count"),
            )
            .where(overdue_clause(self._now(now)))
            .group_by(ContractModel.customer_uid)
            .subquery("overdue_data")
        )
        stmt = select(func.avg(per_customer.c.overdue_count))
        with self._session() as session:
            return round_average(session.execute(stmt).scalar_one())

    def average_overdue_minutes_per_vehicle(self) -> dict[str, Decimal]:
        """
        Mean delay in minutes per vehicle, over contracts returned late.

        Vehicles still out are excluded: their delay is not yet known.
        """
        stmt = (
            select(
                ContractModel.vehicle_uid,
                func.avg(overdue_minutes_expr()).label("average_time_overdue"),
            )
            .where(returned_late_clause())
            .group_by(ContractModel.vehicle_uid)
            .order_by(ContractModel.vehicle_uid)
        )
        with self._session() as session:
            return {
                row.vehicle_uid: round_average(row.average_time_overdue)
                for row in session.execute(stmt)
            }
