"""Reservation error taxonomy

Business-rule outcomes derive from ``ReservationError``; storage and
transport failures derive from ``StorageError``. Each class carries the
stable ``code`` and the HTTP ``status_code`` the API layer responds with.
"""

from typing import Any, Dict, List, Optional


class ReservationError(Exception):
    """Expected business-rule outcome the caller must react to"""

    code = "reservation_error"
    status_code = 400
    default_message = "Reservation request rejected"

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code}


class ValidationFailed(ReservationError):
    code = "validation_failed"
    status_code = 422
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None, **context: Any):
        super().__init__(message, **context)
        self.errors = errors or []

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["errors"] = self.errors
        return data


class InvalidDateFormat(ReservationError):
    code = "invalid_date_format"
    default_message = "Invalid date format, expected YYYY-MM-DD"


class InvalidTimeFormat(ReservationError):
    code = "invalid_time_format"
    default_message = "Invalid time format, expected HH:MM (24-hour)"


class InvalidReservationTime(ReservationError):
    code = "invalid_reservation_time"
    default_message = "Reservation must be at least 1 hour in the future"


class InvalidStatus(ReservationError):
    code = "invalid_status"
    default_message = "Invalid reservation status"


class InvalidStatusTransition(ReservationError):
    code = "invalid_status_transition"
    status_code = 409
    default_message = "Invalid reservation status transition"


class InsufficientCapacity(ReservationError):
    code = "insufficient_capacity"
    status_code = 409
    default_message = "No table with sufficient capacity"


class TableUnavailable(ReservationError):
    code = "table_unavailable"
    status_code = 409
    default_message = "Table is not available at the requested time"


class TableNotFound(ReservationError):
    code = "table_not_found"
    status_code = 404
    default_message = "Table not found"


class ReservationNotFound(ReservationError):
    code = "reservation_not_found"
    status_code = 404
    default_message = "Reservation not found"


class DuplicateTableNumber(ReservationError):
    code = "duplicate_table_number"
    status_code = 409
    default_message = "Table number already exists"


class StorageError(Exception):
    """Database or transport failure; the only kind worth retrying upstream"""

    code = "storage_error"
    status_code = 503
    default_message = "Storage operation failed"

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code}


class CustomerLookupFailed(StorageError):
    code = "customer_lookup_failed"
    default_message = "Failed to find or create customer"


class AvailabilityCheckFailed(StorageError):
    code = "availability_check_failed"
    default_message = "Failed to check table availability"
