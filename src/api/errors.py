"""Translation of domain errors into HTTP errors."""

import logging

from fastapi import HTTPException, status

from core.exceptions import (
    AIGatewayError,
    ConfigurationError,
    DuplicateRecordError,
    InvitationAlreadyAcceptedError,
    InvitationAlreadyUsedError,
    InvitationDeliveryError,
    InvitationExpiredError,
    InvitationNotFoundError,
    PermissionDeniedError,
    PortalError,
    RecordNotFoundError,
    ValidationError,
)
from utils.user_manager import UserAlreadyExistsError, UserNotFoundError

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (InvitationNotFoundError, status.HTTP_404_NOT_FOUND),
    (InvitationAlreadyUsedError, status.HTTP_410_GONE),
    (InvitationExpiredError, status.HTTP_410_GONE),
    (InvitationAlreadyAcceptedError, status.HTTP_409_CONFLICT),
    (InvitationDeliveryError, status.HTTP_502_BAD_GATEWAY),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND),
    (UserNotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateRecordError, status.HTTP_409_CONFLICT),
    (UserAlreadyExistsError, status.HTTP_409_CONFLICT),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def http_error(exc: Exception) -> HTTPException:
    """Build the HTTPException a route raises for a domain error."""
    if isinstance(exc, AIGatewayError):
        return HTTPException(status_code=exc.status_code, detail=str(exc))
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    logger.exception("Unhandled error: %s", exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )


# Everything a route may translate with http_error()
DOMAIN_ERRORS = (PortalError, UserAlreadyExistsError, UserNotFoundError)
