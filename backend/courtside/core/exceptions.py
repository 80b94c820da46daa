# backend/courtside/core/exceptions.py
"""
Domain-specific exceptions for the Courtside scheduling engine.

Every exception carries a stable ``code`` that names the error kind
(VALIDATION, CLOSED, OUT_OF_HOURS, SLOT_TAKEN, OVERLAP_*, PERMISSION,
NOT_FOUND, STATE, ...). The API layer converts them with
``to_http_exception``; services never build HTTP responses themselves.
"""

from typing import Any, ClassVar, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: ClassVar[int] = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: ClassVar[Optional[str]] = None
    default_message: ClassVar[str] = "An error occurred processing your request"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.code = code or self.default_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "code": self.code, "details": self.details}

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.to_dict())


class ValidationException(DomainException):
    """Raised when input is malformed: bad date/time, misaligned or empty interval."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION"
    default_message = "Invalid request"


class NotFoundException(DomainException):
    """Raised when a referenced court, establishment, pass or block does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"
    default_message = "Resource not found"


class ForbiddenException(DomainException):
    """Raised when the actor has the wrong role or does not own the court."""

    status_code = status.HTTP_403_FORBIDDEN
    default_code = "PERMISSION"
    default_message = "You do not have permission to perform this action"


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE
    default_code = "BUSINESS_RULE"


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    default_code = "SERVICE_ERROR"


class StateException(ConflictException):
    """Raised when an operation targets a pass/booking in the wrong lifecycle state."""

    default_code = "STATE"
    default_message = "Operation not allowed in the current state"


# Calendar


class CourtClosedException(BusinessRuleException):
    """The requested date is closed in the resolved operating calendar."""

    default_code = "CLOSED"
    default_message = "The establishment is closed on this date"


class OutOfHoursException(BusinessRuleException):
    """The requested interval falls outside the resolved operating window."""

    default_code = "OUT_OF_HOURS"
    default_message = "Time outside of operating hours"


# Conflicts


class SlotTakenException(ConflictException):
    """A conflicting commitment already holds part of the requested interval."""

    default_code = "SLOT_TAKEN"
    default_message = "Time slot unavailable"


class OverlapBookingException(SlotTakenException):
    default_code = "OVERLAP_BOOKING"
    default_message = "Time slot unavailable: it overlaps an existing booking"


class OverlapBlockException(SlotTakenException):
    default_code = "OVERLAP_BLOCK"
    default_message = "Time slot unavailable: it overlaps an administrative block"


class OverlapPassException(SlotTakenException):
    default_code = "OVERLAP_PASS"
    default_message = "Time slot unavailable: reserved by an active monthly pass"


class OverlapCustomerException(SlotTakenException):
    """The customer already holds a booking at this time on another court."""

    default_code = "OVERLAP_CUSTOMER"
    default_message = "You already have a booking at this time"


# Supplementary business rules


class RequestWindowClosedException(BusinessRuleException):
    default_code = "REQUEST_WINDOW"
    default_message = "Monthly pass requests are not open for this month yet"


class NotConfiguredException(BusinessRuleException):
    default_code = "NOT_CONFIGURED"
    default_message = "This court has no monthly pass configured"


class AlreadyAvailableException(BusinessRuleException):
    default_code = "ALREADY_AVAILABLE"
    default_message = "This time is already available for booking"


class RateLimitedException(DomainException):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_code = "RATE_LIMITED"
    default_message = "Too many booking attempts. Please wait a moment and try again."


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Used when data access operations fail, such as connection issues,
    query failures, or constraint violations.
    """
