"""
Domain exceptions.

Typed exceptions for explicit error handling at the endpoint boundary.
Client input errors map to 4xx, everything upstream maps to 500.
"""

from __future__ import annotations


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all domain errors.

    All domain-specific exceptions inherit from this.
    Allows catching all domain errors with single except clause.
    """

    pass


# ═══════════════════════════════════════════════════════════
# CLIENT INPUT EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ClientInputError(DomainError):
    """
    Request rejected before any processing.

    Carries the HTTP status and the fixed public message. Never logged
    as a server fault.
    """

    status_code = 400
    public_message = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)


class MethodNotAllowedError(ClientInputError):
    """
    HTTP method other than POST.

    Example:
        >>> raise MethodNotAllowedError()
    """

    status_code = 405
    public_message = "Only POST allowed"


class MissingFieldsError(ClientInputError):
    """
    Body missing imageBase64, produce or a numeric daysUntilUse.

    Raised when:
    - Body is not a JSON object
    - A required field is absent or empty
    - daysUntilUse is not a number

    Example:
        >>> raise MissingFieldsError()
    """

    status_code = 400
    public_message = "Missing fields"


# ═══════════════════════════════════════════════════════════
# EXTERNAL SERVICE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class UpstreamError(DomainError):
    """
    Inference service call failed.

    Raised when:
    - API call fails (network, non-2xx, timeout)
    - Model refused to answer
    - Reply is empty or not a JSON object

    Example:
        >>> raise UpstreamError("Invalid JSON response: 'Sorry'")
    """

    pass


class SchemaViolationError(UpstreamError):
    """
    Reply parsed as JSON but breaks the AnalysisResult contract.

    Raised when:
    - A mandatory field is missing
    - A field has the wrong type
    - A numeric field is out of range

    Example:
        >>> raise SchemaViolationError("days_left: Field required")
    """

    pass
