"""
Typed Exception Hierarchy for the Rental Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers must be able to tell "the contract does not exist" apart from "the
store is down" without parsing messages. Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE attribute (machine-readable)
  3. Structured DATA as attributes (contract_id, uid, ...)

Example - WRONG way to handle errors:
    try:
        billings.is_contract_fully_paid(contract_id)
    except Exception as e:
        if "not found" in str(e):  # FRAGILE
            ...

Example - RIGHT way:
    try:
        paid = billings.is_contract_fully_paid(contract_id)
    except ContractNotFoundError as e:
        log.warning("unknown contract", extra={"contract_id": e.contract_id})

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    RentalKernelError (base)
    |
    +-- ContractError
    |   +-- ContractNotFoundError
    |   +-- InvalidContractError
    |   +-- ContractReferencedError
    |   +-- ContractAlreadyReturnedError
    |
    +-- BillingError
    |   +-- BillingContractNotFoundError
    |   +-- InvalidBillingError
    |
    +-- DocumentError
    |   +-- DocumentAlreadyExistsError
    |
    +-- StoreError
        +-- StoreConnectionError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                        | When Raised
-----------|-----------------------------|-----------------------------------------
Contract   | CONTRACT_NOT_FOUND          | Reconciliation on an unknown contract id
           | INVALID_CONTRACT            | Rental window / price / uid invalid
           | CONTRACT_REFERENCED         | Delete blocked by billing rows (FK)
           | CONTRACT_ALREADY_RETURNED   | Vehicle returned twice
-----------|-----------------------------|-----------------------------------------
Billing    | BILLING_CONTRACT_NOT_FOUND  | Billing references unknown contract (FK)
           | INVALID_BILLING             | Negative amount / missing contract id
-----------|-----------------------------|-----------------------------------------
Document   | DOCUMENT_ALREADY_EXISTS     | Duplicate customer / vehicle uid
-----------|-----------------------------|-----------------------------------------
Store      | STORE_CONNECTION_FAILED     | Store unreachable at startup (fatal)

===============================================================================
NOT-FOUND IS NOT AN ERROR
===============================================================================

Lookups (find_by_id, find_by_uid) return None and mutations on unknown ids
(update, delete) return False. Only the reconciliation path raises
ContractNotFoundError, because treating an unknown contract as either "paid"
or "unpaid" would be wrong.
"""


class RentalKernelError(Exception):
    """
    Base exception for all rental kernel errors.

    All subclasses carry a `code` class attribute for machine-readable
    identification.
    """

    code: str = "RENTAL_KERNEL_ERROR"


# Contract-related exceptions


class ContractError(RentalKernelError):
    """Base exception for contract errors."""

    code: str = "CONTRACT_ERROR"


class ContractNotFoundError(ContractError):
    """Contract with the given id does not exist in the relational store."""

    code: str = "CONTRACT_NOT_FOUND"

    def __init__(self, contract_id: int):
        self.contract_id = contract_id
        super().__init__(f"Contract not found: {contract_id}")


class InvalidContractError(ContractError):
    """Contract fields violate a value-type invariant."""

    code: str = "INVALID_CONTRACT"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid contract: {reason}")


class ContractReferencedError(ContractError):
    """Contract cannot be deleted while billing rows still reference it."""

    code: str = "CONTRACT_REFERENCED"

    def __init__(self, contract_id: int):
        self.contract_id = contract_id
        super().__init__(
            f"Contract {contract_id} is referenced by billing records and cannot be deleted"
        )


class ContractAlreadyReturnedError(ContractError):
    """The vehicle for this contract has already been returned."""

    code: str = "CONTRACT_ALREADY_RETURNED"

    def __init__(self, contract_id: int, returning_datetime: str):
        self.contract_id = contract_id
        self.returning_datetime = returning_datetime
        super().__init__(
            f"Contract {contract_id} already returned at {returning_datetime}"
        )


# Billing-related exceptions


class BillingError(RentalKernelError):
    """Base exception for billing errors."""

    code: str = "BILLING_ERROR"


class BillingContractNotFoundError(BillingError):
    """Billing record references a contract id the store does not know."""

    code: str = "BILLING_CONTRACT_NOT_FOUND"

    def __init__(self, contract_id: int):
        self.contract_id = contract_id
        super().__init__(f"Billing references unknown contract: {contract_id}")


class InvalidBillingError(BillingError):
    """Billing fields violate a value-type invariant."""

    code: str = "INVALID_BILLING"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid billing: {reason}")


# Document-store exceptions


class DocumentError(RentalKernelError):
    """Base exception for document store errors."""

    code: str = "DOCUMENT_ERROR"


class DocumentAlreadyExistsError(DocumentError):
    """A document with the same uid already exists in the collection."""

    code: str = "DOCUMENT_ALREADY_EXISTS"

    def __init__(self, collection: str, uid: str):
        self.collection = collection
        self.uid = uid
        super().__init__(f"{collection} already exists: {uid}")


# Store-level exceptions


class StoreError(RentalKernelError):
    """Base exception for store connectivity errors."""

    code: str = "STORE_ERROR"


class StoreConnectionError(StoreError):
    """
    A data store could not be reached at startup.

    This is fatal: the operation that requested the connection must abort
    rather than proceed without one.
    """

    code: str = "STORE_CONNECTION_FAILED"

    def __init__(self, store: str, target: str, reason: str):
        self.store = store
        self.target = target
        self.reason = reason
        super().__init__(f"Cannot connect to {store} store at {target}: {reason}")

