"""Domain-specific exceptions

Each error knows the HTTP status and JSON body it maps to at the API boundary.
"""

from typing import Any, Dict


class EnrollmentError(Exception):
    """Base exception for the enrollment payment flow"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(EnrollmentError):
    """Request field is missing or malformed"""

    status_code = 400

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class NotFoundError(EnrollmentError):
    """No prior application exists for the applicant"""

    status_code = 404


class ConflictError(EnrollmentError):
    """Application is already paid"""

    status_code = 400


class GatewayDeclinedError(EnrollmentError):
    """Payment processor rejected or did not complete the charge"""

    status_code = 400

    def __init__(
        self,
        message: str,
        status: str | None = None,
        requires_action: bool = False,
        details: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.requires_action = requires_action
        self.details = details

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        if self.status is not None:
            body["status"] = self.status
            body["requiresAction"] = self.requires_action
        if self.details is not None:
            body["details"] = self.details
        return body


class DependencyError(EnrollmentError):
    """Store, mail or render failure. User-facing message stays generic."""

    status_code = 500


class StoreError(DependencyError):
    """State store read or write failed"""

    pass


class NotificationError(DependencyError):
    """Invoice rendering or mail delivery failed"""

    pass


class ReconciliationRequiredError(DependencyError):
    """Money was captured but the enrollment could not be recorded"""

    def __init__(self, message: str, payment_reference: str, applicant: str):
        super().__init__(message)
        self.payment_reference = payment_reference
        self.applicant = applicant

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        body["paymentId"] = self.payment_reference
        return body


class UnhandledError(EnrollmentError):
    """Catch-all for anything unexpected"""

    status_code = 500
