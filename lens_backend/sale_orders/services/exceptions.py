# sale_orders/services/exceptions.py

"""
SALE ORDER DOMAIN ERRORS

Mapping at the API boundary (sale_orders/api/viewsets.py):
- SaleOrderValidationError   -> 400  {"success": false, "errors": [{field, message}]}
- SaleOrderNotFoundError     -> 404
- ConflictError (and kids)   -> 409
- master lookup errors are re-exported here so callers import one module
"""

from masters.services.exceptions import (  # noqa: F401
    CreditLimitExceededError,
    MasterDataError,
    PriceNotConfiguredError,
    RecordNotFoundError,
    UpstreamLookupError,
)


class SaleOrderError(Exception):
    """Base exception for all sale order domain errors."""


class SaleOrderValidationError(SaleOrderError):
    """
    Field-keyed validation failure.

    `errors` maps a wire field name (e.g. "rightSpherical",
    "additionalPrice[0].value") to a human-readable message.
    """

    def __init__(self, errors: dict, message: str = "Sale order validation failed"):
        super().__init__(message)
        self.errors = dict(errors)

    def as_field_errors(self) -> list[dict]:
        return [
            {"field": field, "message": message}
            for field, message in self.errors.items()
        ]


class PricingInputError(SaleOrderValidationError):
    """Raised when a pricing input is non-numeric, negative or out of range."""

    def __init__(self, errors: dict, message: str = "Invalid pricing input"):
        super().__init__(errors, message)


class SaleOrderNotFoundError(SaleOrderError):
    """Raised when a sale order does not exist or was soft-deleted."""


class ConflictError(SaleOrderError):
    """Raised when a write conflicts with the order's current state."""


class StaleOrderStatusError(ConflictError):
    """Raised when the caller's view of the order status is out of date."""


class InvalidStatusTransitionError(ConflictError):
    """Raised when a status change is not allowed by the lifecycle."""


class OrderLockedError(ConflictError):
    """Raised when editing or deleting an order in a terminal status."""
