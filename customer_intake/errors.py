from typing import Any

from customer_intake.models import ValidationResult


class IntakeError(Exception):
    """Base exception for customer intake errors."""

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class ValidationFailed(IntakeError):
    """A draft did not pass validation and was not sent anywhere."""

    def __init__(self, result: ValidationResult):
        super().__init__("Validation failed", details=result.messages)
        self.result = result


class TransportError(IntakeError):
    """The customer store could not be reached or rejected the request."""


class IntegrationError(IntakeError):
    """Forwarding a customer to an external integration failed."""
