"""
Portal Domain Exceptions

This module provides the exception hierarchy shared by the Registration Ledger
and the Payment Reconciler. Every exception carries the HTTP status code and a
stable error code so that views can render it without further mapping.

Hierarchy:
- PortalException
  - NotFound: CourseNotFound, RegistrationNotFound, PaymentNotFound
  - Conflict: DuplicateRegistration, CourseFull, GatewayReferenceConflict
  - InvalidState: RegistrationTransitionError
  - Forbidden: RegistrationForbidden
  - CourseInactive
  - ExternalServiceError: GatewayError, GatewayInitError
  - SignatureInvalid: InvalidSignature
  - InvalidPayload

Author: Student Portal Development Team
Version: 1.0.0
"""

from typing import Any, Dict, Optional


class PortalException(Exception):
    """
    Base exception class for all portal domain errors.

    Attributes:
        message (str): Human-readable error message
        status_code (int): HTTP status code returned to the caller
        error_code (str): Stable machine-readable error identifier
        details (Dict[str, Any]): Additional error details

    Example:
        >>> try:
        ...     ledger.approve(registration_id, admin)
        ... except PortalException as e:
        ...     return Response(e.to_dict(), status=e.status_code)
    """

    default_message = "Request could not be processed"
    default_status_code = 400
    default_error_code = "PortalError"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.status_code = status_code or self.default_status_code
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for the API response body.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "detail": self.message,
            "error_code": self.error_code,
            "status_code": self.status_code,
            "details": self.details,
        }


# --- Taxonomy ---


class NotFound(PortalException):
    default_message = "Requested resource not found"
    default_status_code = 404
    default_error_code = "NotFound"


class Conflict(PortalException):
    default_message = "Request conflicts with the current state"
    default_status_code = 409
    default_error_code = "Conflict"


class Forbidden(PortalException):
    default_message = "You do not have permission to perform this action"
    default_status_code = 403
    default_error_code = "Forbidden"


class InvalidState(PortalException):
    default_message = "Operation not allowed in the current state"
    default_status_code = 409
    default_error_code = "InvalidState"


class ExternalServiceError(PortalException):
    default_message = "External service unavailable"
    default_status_code = 502
    default_error_code = "ExternalServiceError"


class SignatureInvalid(PortalException):
    default_message = "Invalid signature"
    default_status_code = 400
    default_error_code = "InvalidSignature"


# --- Registration Ledger ---


class CourseNotFound(NotFound):
    default_message = "Course not found"
    default_error_code = "CourseNotFound"


class RegistrationNotFound(NotFound):
    default_message = "Registration not found"
    default_error_code = "RegistrationNotFound"


class RegistrationForbidden(Forbidden):
    default_message = "Only the owning student may drop this registration"
    default_error_code = "RegistrationForbidden"


class CourseInactive(PortalException):
    default_message = "Course is not active"
    default_status_code = 400
    default_error_code = "CourseInactive"


class CourseFull(Conflict):
    """
    Raised when no seat is left. Returned as 400 at registration time and as
    409 when an approval loses the race for the last seat.
    """

    default_message = "Course is full"
    default_status_code = 400
    default_error_code = "CourseFull"


class DuplicateRegistration(Conflict):
    default_message = "Student is already registered for this course in this semester"
    default_error_code = "DuplicateRegistration"


class RegistrationTransitionError(InvalidState):
    """
    Raised when a registration event is not allowed from its current status.

    Attributes:
        current_status (str): Status the registration was in
        event (str): Event that was attempted
    """

    def __init__(self, current_status: str, event: str) -> None:
        self.current_status = current_status
        self.event = event
        super().__init__(
            message=f"Cannot {event} a registration that is {current_status}",
            details={"current_status": current_status, "event": event},
        )


# --- Payment Reconciler ---


class PaymentNotFound(NotFound):
    default_message = "Payment not found"
    default_error_code = "PaymentNotFound"


class GatewayReferenceConflict(Conflict):
    default_message = "Gateway reference is already assigned to another payment"
    default_error_code = "GatewayReferenceConflict"


class GatewayError(ExternalServiceError):
    """
    Raised when the payment gateway is unreachable or answers with a failure.

    Attributes:
        gateway_status (Optional[int]): HTTP status returned by the gateway
    """

    default_message = "Payment gateway request failed"
    default_error_code = "GatewayError"

    def __init__(
        self,
        message: Optional[str] = None,
        gateway_status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.gateway_status = gateway_status
        details = dict(details or {})
        if gateway_status is not None:
            details["gateway_status"] = gateway_status
        super().__init__(message=message, details=details)


class GatewayInitError(GatewayError):
    default_message = "Payment gateway initialization failed"
    default_error_code = "GatewayInitError"


class InvalidSignature(SignatureInvalid):
    pass


class InvalidPayload(PortalException):
    default_message = "Malformed request body"
    default_status_code = 400
    default_error_code = "ValidationError"
