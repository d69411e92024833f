"""
rental_services.bootstrap -- Wire a RentalConfig into repositories and services.

Responsibility:
    The single place where configuration becomes live objects: logging,
    the SQLAlchemy engine and session factory, the optional MongoDB
    database, the four repositories and the two services.

Architecture position:
    Services -- composition root. Nothing else constructs engines or clients.

Failure modes:
    - StoreConnectionError if either configured store cannot be reached;
      no partially-built application is returned.

Usage:
    from rental_config import load_config
    from rental_services.bootstrap import build_application

    app = build_application(load_config("rental.yaml"), create_schema=True)
    try:
        report = app.reporting.overdue_report()
    finally:
        app.close()
"""

from __future__ import annotations

from dataclasses import dataclass

from pymongo.database import Database
from sqlalchemy.engine import Engine

from rental_config.schema import RentalConfig
from rental_kernel.db.documents import connect_document_store
from rental_kernel.db.engine import create_session_factory, create_tables, init_engine
from rental_kernel.domain.clock import Clock, SystemClock
from rental_kernel.exceptions import StoreConnectionError
from rental_kernel.logging_config import configure_logging, get_logger
from rental_kernel.repositories.billing_repository import BillingRepository
from rental_kernel.repositories.contract_repository import ContractRepository
from rental_kernel.repositories.customer_repository import CustomerRepository
from rental_kernel.repositories.vehicle_repository import VehicleRepository
from rental_services.lifecycle_service import RentalLifecycleService
from rental_services.reporting_service import RentalReportingService

logger = get_logger("services.bootstrap")


@dataclass
class RentalApplication:
    """Live objects built from one RentalConfig."""

    config: RentalConfig
    engine: Engine
    contracts: ContractRepository
    billings: BillingRepository
    lifecycle: RentalLifecycleService
    reporting: RentalReportingService
    database: Database | None = None
    customers: CustomerRepository | None = None
    vehicles: VehicleRepository | None = None

    def close(self) -> None:
        """Release the connection pools of both stores."""
        self.engine.dispose()
        if self.database is not None:
            self.database.client.close()
        logger.info("application_closed")


def build_application(
    config: RentalConfig,
    clock: Clock | None = None,
    create_schema: bool = False,
) -> RentalApplication:
    """
    Build the application described by ``config``.

    Args:
        config: Loaded configuration.
        clock: Time source for services and repositories (SystemClock if None).
        create_schema: Create the contract/billing tables if missing.

    Raises:
        StoreConnectionError: a configured store is unreachable.
    """
    configure_logging(level=config.log_level)
    clock = clock or SystemClock()

    engine = init_engine(config.relational)
    if create_schema:
        create_tables(engine)

    database = None
    customers = vehicles = None
    if config.documents is not None:
        try:
            database = connect_document_store(config.documents)
        except StoreConnectionError:
            engine.dispose()
            raise
        customers = CustomerRepository(database, config.documents.customer_collection)
        vehicles = VehicleRepository(database, config.documents.vehicle_collection)

    session_factory = create_session_factory(engine)
    contracts = ContractRepository(session_factory, clock)
    billings = BillingRepository(session_factory)

    logger.info(
        "application_built",
        extra={
            "dialect": engine.dialect.name,
            "document_store": database is not None,
        },
    )
    return RentalApplication(
        config=config,
        engine=engine,
        contracts=contracts,
        billings=billings,
        lifecycle=RentalLifecycleService(contracts, billings, clock),
        reporting=RentalReportingService(contracts, billings, clock),
        database=database,
        customers=customers,
        vehicles=vehicles,
    )
