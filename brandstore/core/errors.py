"""
Error taxonomy for BrandStore.

Every failure a request can end in is one of these. Each carries the HTTP
status code the API layer answers with, so handlers never need to map
exception types to codes themselves.
"""
from typing import Optional


class BrandStoreError(Exception):
    """Base class for all errors surfaced to API callers."""

    status_code = 500
    kind = "ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class ValidationFailed(BrandStoreError):
    """Missing, blank or malformed required input, or a status outside the fixed set."""

    status_code = 400
    kind = "VALIDATION_FAILED"


class DuplicateKey(BrandStoreError):
    """A business-level unique key is already taken."""

    status_code = 400
    kind = "DUPLICATE_KEY"

    def __init__(self, message: str, field: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, status_code)
        self.field = field

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.field:
            body["field"] = self.field
        return body


class NotFound(BrandStoreError):
    status_code = 404
    kind = "NOT_FOUND"


class Unauthorized(BrandStoreError):
    status_code = 401
    kind = "UNAUTHORIZED"


class StoreUnavailable(BrandStoreError):
    """The relational or object store failed for infrastructure reasons."""

    status_code = 500
    kind = "STORE_UNAVAILABLE"


class PaymentGatewayError(BrandStoreError):
    status_code = 502
    kind = "PAYMENT_GATEWAY_ERROR"


# ---------------------------------------------------------------------------
# Adapter-level errors (never reach the API layer directly)
# ---------------------------------------------------------------------------

class DuplicateKeyViolation(StoreUnavailable):
    """
    Unique constraint violation reported by the relational store.

    ``column`` is the offending column or constraint name as reported by the
    database driver (e.g. ``email`` or ``uq_customers_email``). Callers map
    it to DuplicateKey; unmapped it answers as STORE_UNAVAILABLE.
    """

    def __init__(self, column: str, message: str):
        super().__init__(message)
        self.column = column


class ObjectStoreError(Exception):
    """An object store call failed. Raised by adapters, caught by cleanup helpers."""

    def __init__(self, key: Optional[str], message: str):
        super().__init__(message)
        self.key = key
