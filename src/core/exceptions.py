"""Custom exception classes for the MTSS school portal.

This module defines application-specific exceptions following Google Python
Style Guide.
"""


class PortalError(Exception):
    """Base exception for all portal errors."""

    pass


class ConfigurationError(PortalError):
    """Raised when there is a configuration error."""

    pass


class ValidationError(PortalError):
    """Raised when request data fails validation before any store access."""

    pass


class PermissionDeniedError(PortalError):
    """Raised when the current user may not act on a record."""

    pass


class RecordNotFoundError(PortalError):
    """Raised when a requested record cannot be found."""

    def __init__(self, kind: str, record_id: str):
        """Initialize the exception.

        Args:
            kind: Human readable record type, e.g. "Class".
            record_id: The ID of the record that was not found.
        """
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} '{record_id}' not found")


class DuplicateRecordError(PortalError):
    """Raised when a unique constraint would be violated."""

    pass


# --- Invitation lifecycle ---


class InvitationError(PortalError):
    """Base class for teacher invitation token errors."""

    pass


class InvitationNotFoundError(InvitationError):
    """Raised when no invitation matches a token."""

    def __init__(self):
        super().__init__(
            "Invalid invitation link. Please contact the administrator for a new invitation."
        )


class InvitationAlreadyUsedError(InvitationError):
    """Raised when an invitation token has already been accepted."""

    def __init__(self):
        super().__init__("This invitation has already been used. Please log in instead.")


class InvitationExpiredError(InvitationError):
    """Raised when an invitation token is past its expiry time."""

    def __init__(self):
        super().__init__(
            "This invitation has expired. Please contact the administrator for a new invitation."
        )


class InvitationAlreadyAcceptedError(InvitationError):
    """Raised when re-inviting an email that already registered."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"{email} has already been registered as a teacher")


class InvitationDeliveryError(InvitationError):
    """Raised when the invitation was stored but the email could not be sent."""

    pass


# --- AI gateway ---


class AIGatewayError(PortalError):
    """Base class for errors talking to the AI completion gateway."""

    status_code = 502


class AIRateLimitError(AIGatewayError):
    """Raised when the gateway answers HTTP 429."""

    status_code = 429

    def __init__(self):
        super().__init__("Rate limit exceeded. Please try again in a moment.")


class AICreditsExhaustedError(AIGatewayError):
    """Raised when the gateway answers HTTP 402."""

    status_code = 402

    def __init__(self):
        super().__init__("AI credits exhausted. Please contact support.")


class AIServiceError(AIGatewayError):
    """Raised for any other gateway failure."""

    pass


class MalformedResponseError(AIGatewayError):
    """Raised when the model reply cannot be parsed as the expected JSON."""

    def __init__(
        self,
        raw_content: str,
        message: str = "The AI service returned a response that is not valid JSON.",
    ):
        self.raw_content = raw_content
        super().__init__(message)
