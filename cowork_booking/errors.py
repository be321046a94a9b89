"""
Error taxonomy for the booking workflow.

    BookingValidationError    form-level problems, raised before any network call
    ReservationConflictError  overlap with an unavailability window or a reservation
    TransportError            network failure talking to the backend
      ApiError                backend answered with an HTTP error status
        SessionExpiredError   401, the session has been cleared
        AccessForbiddenError  403
      MalformedResponseError  body is not JSON or does not match the expected shape
    MissingReferenceError     a payment points at a record that no longer exists
    MissingRecipientError     a payment's record has no email to invoice
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from cowork_booking.config import HOME_ROUTE, SIGNIN_ROUTE


class CoworkError(Exception):
    """Base class for all errors raised by cowork_booking."""


class BookingValidationError(CoworkError):
    pass


class ConflictKind(str, Enum):
    UNAVAILABLE = "UNAVAILABLE"
    RESERVED = "RESERVED"


class ReservationConflictError(CoworkError):
    def __init__(self, kind: ConflictKind, message: str):
        super().__init__(message)
        self.kind = kind


class TransportError(CoworkError):
    pass


class ApiError(TransportError):
    redirect: Optional[str] = None

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class SessionExpiredError(ApiError):
    redirect = SIGNIN_ROUTE


class AccessForbiddenError(ApiError):
    redirect = HOME_ROUTE


class MalformedResponseError(TransportError):
    """The backend answered 2xx with a body that cannot be read."""


class MissingReferenceError(CoworkError):
    """A payment's foreign key does not resolve to a loaded record."""

    def __init__(self, entity: str, payment_id: Optional[int], ref_id: Optional[int]):
        if ref_id is None:
            message = f"Payment {payment_id} is not linked to any {entity}"
        else:
            message = f"{entity.capitalize()} {ref_id} for payment {payment_id} not found"
        super().__init__(message)
        self.entity = entity
        self.payment_id = payment_id
        self.ref_id = ref_id


class MissingRecipientError(CoworkError):
    """A payment's record resolves but carries no email to send the invoice to."""

    def __init__(self, entity: str, payment_id: Optional[int], record_id: Optional[int]):
        super().__init__(f"{entity.capitalize()} {record_id} for payment {payment_id} has no email")
        self.entity = entity
        self.payment_id = payment_id
        self.record_id = record_id
