"""
Typed Exception Hierarchy for the Stock Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (REST resources, UI controllers, batch jobs) must be able to tell a
bad request apart from a blocked business rule without parsing messages.

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        operation_service.purge(operation_id)
    except OperationHasTransactionsError as e:
        api_response(code=e.code, operation=e.operation_number)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from StockKernelError:

    StockKernelError (base)
    |
    +-- InvalidArgumentError
    |   +-- OperationNumberTooLongError
    |   +-- OperationValidationError
    |
    +-- DomainConstraintViolation
    |   +-- OperationHasTransactionsError
    |   +-- OperationNumberAlreadyExistsError
    |
    +-- StockOperationNotFoundError
    |
    +-- OperationNotAuthorizedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                         | When Raised
----------------|------------------------------|-----------------------------------
Argument        | INVALID_ARGUMENT             | Required input missing
                | OPERATION_NUMBER_TOO_LONG    | Number exceeds 255 characters
                | OPERATION_INVALID            | Draft fails structural checks
----------------|------------------------------|-----------------------------------
Constraint      | OPERATION_HAS_TRANSACTIONS   | Purge with live transactions
                | OPERATION_NUMBER_EXISTS      | Duplicate operation number
----------------|------------------------------|-----------------------------------
Lookup          | STOCK_OPERATION_NOT_FOUND    | Operation id required but absent
----------------|------------------------------|-----------------------------------
Authorization   | OPERATION_NOT_AUTHORIZED     | User may not process the type

===============================================================================
HANDLING PATTERNS
===============================================================================

1. "Nothing matched" is NOT an exception for single-item lookups:

    operation = selector.get_operation_by_number("SO-000001")
    if operation is None:
        ...

2. InvalidArgumentError is never retried; surface it to the caller.

3. DomainConstraintViolation is user-facing; never swallow it.

4. Storage errors (sqlalchemy.exc.*) are NOT wrapped by the kernel.
"""


class StockKernelError(Exception):
    """
    Base exception for all stock kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "STOCK_KERNEL_ERROR"


# Argument errors


class InvalidArgumentError(StockKernelError):
    """A required input is missing or out of bounds."""

    code: str = "INVALID_ARGUMENT"

    def __init__(self, argument: str, message: str):
        self.argument = argument
        super().__init__(message)


class OperationNumberTooLongError(InvalidArgumentError):
    """Operation number exceeds the maximum length."""

    code: str = "OPERATION_NUMBER_TOO_LONG"

    def __init__(self, length: int, max_length: int):
        self.length = length
        self.max_length = max_length
        super().__init__(
            "operation_number",
            f"The operation number must be less than {max_length + 1} "
            f"characters (got {length}).",
        )


class OperationValidationError(InvalidArgumentError):
    """A stock operation draft failed structural validation."""

    code: str = "OPERATION_INVALID"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(field, f"Invalid stock operation ({field}): {reason}")


# Business rule violations


class DomainConstraintViolation(StockKernelError):
    """A business rule blocks the requested mutation."""

    code: str = "DOMAIN_CONSTRAINT_VIOLATION"


class OperationHasTransactionsError(DomainConstraintViolation):
    """Operation cannot be deleted while it has associated transactions."""

    code: str = "OPERATION_HAS_TRANSACTIONS"

    def __init__(
        self,
        operation_id: str,
        operation_number: str | None,
        transaction_count: int,
        reserved_count: int,
    ):
        self.operation_id = operation_id
        self.operation_number = operation_number
        self.transaction_count = transaction_count
        self.reserved_count = reserved_count
        super().__init__(
            "Stock operations can not be deleted if there are any "
            f"associated transactions (operation {operation_number or operation_id}: "
            f"{transaction_count} transaction(s), {reserved_count} reserved)."
        )


class OperationNumberAlreadyExistsError(DomainConstraintViolation):
    """Another operation already uses this operation number."""

    code: str = "OPERATION_NUMBER_EXISTS"

    def __init__(self, operation_number: str):
        self.operation_number = operation_number
        super().__init__(f"Operation number already exists: {operation_number}")


# Lookup errors


class StockOperationNotFoundError(StockKernelError):
    """Stock operation with given ID was not found."""

    code: str = "STOCK_OPERATION_NOT_FOUND"

    def __init__(self, operation_id: str):
        self.operation_id = operation_id
        super().__init__(f"Stock operation not found: {operation_id}")


# Authorization errors


class OperationNotAuthorizedError(StockKernelError):
    """The acting user may not process operations of this type."""

    code: str = "OPERATION_NOT_AUTHORIZED"

    def __init__(self, user_id: str, operation_type: str):
        self.user_id = user_id
        self.operation_type = operation_type
        super().__init__(
            f"The user {user_id} is not authorized to process "
            f"'{operation_type}' operations."
        )
