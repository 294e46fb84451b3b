# masters/services/exceptions.py

"""
MASTER DATA LOOKUP ERRORS

Raised by the read-side collaborators the sale-order engine depends on.
"no data" (RecordNotFoundError) and "could not look it up"
(UpstreamLookupError) are kept apart so callers never confuse
"customer has zero outstanding" with "standing unknown".
"""


class MasterDataError(Exception):
    """Base exception for all master data lookups."""


class RecordNotFoundError(MasterDataError):
    """Raised when a referenced master record does not exist or is inactive."""

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class PriceNotConfiguredError(RecordNotFoundError):
    """Raised when no price row exists for a lens/coating combination."""


class UpstreamLookupError(MasterDataError):
    """Raised when a master lookup fails (database error, timeout)."""


class CreditLimitExceededError(MasterDataError):
    """Raised by the credit gate when the blocking policy is enabled."""
