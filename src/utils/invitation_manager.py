"""Teacher invitation token lifecycle.

An administrator invites a teacher by email. The invitation carries a random
single-use token that gates the teacher sign-up form:

    pending --consume--> accepted      (terminal)
    pending --resend-->  pending       (token and expiry rotate)
    pending --time-->    "expired"     (derived, never stored)

There is at most one invitation row per email; resending overwrites it.
"""

import logging
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Callable, List, Optional

import pytz
from sqlalchemy.orm import Session

from config import APP_ORIGIN, INVITATION_EXPIRY_DAYS, MIN_PASSWORD_LENGTH
from core.exceptions import (
    InvitationAlreadyAcceptedError,
    InvitationAlreadyUsedError,
    InvitationDeliveryError,
    InvitationExpiredError,
    InvitationNotFoundError,
    ValidationError,
)
from models.invitation import TeacherInvitationModel
from schemas.invitation import InvitationValidation
from schemas.user import User
from utils.email_sender import EmailDeliveryError, EmailSender
from utils.user_manager import UserManager, normalize_email

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
STATUS_EXPIRED = "expired"

# 16 bytes of randomness, URL safe
TOKEN_BYTES = 16


def _utc_now() -> datetime:
    return datetime.now(pytz.utc)


def _parse_time(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def is_active(model: TeacherInvitationModel, now: datetime) -> bool:
    """The one definition of a usable invitation."""
    return model.status == STATUS_PENDING and now <= _parse_time(model.expires_at)


def display_status(model: TeacherInvitationModel, now: datetime) -> str:
    if model.status == STATUS_ACCEPTED:
        return STATUS_ACCEPTED
    if not is_active(model, now):
        return STATUS_EXPIRED
    return STATUS_PENDING


def build_invite_link(token: str, origin: Optional[str] = None) -> str:
    base = (origin or APP_ORIGIN).rstrip("/")
    return f"{base}/teacher-signup?token={token}"


class InvitationManager:
    """Issues, validates and consumes teacher invitation tokens."""

    def __init__(
        self,
        db: Session,
        user_manager: Optional[UserManager] = None,
        email_sender: Optional[EmailSender] = None,
        clock: Optional[Callable[[], datetime]] = None,
        expiry_days: int = INVITATION_EXPIRY_DAYS,
    ):
        """Initialize InvitationManager.

        Args:
            db: SQLAlchemy Session.
            user_manager: Identity provider used when a token is consumed.
            email_sender: Delivers the invitation link.
            clock: Returns the current UTC time; injectable for tests.
            expiry_days: Lifetime of a freshly issued token.
        """
        self.db = db
        self.user_manager = user_manager or UserManager(db)
        self.email_sender = email_sender or EmailSender()
        self.clock = clock or _utc_now
        self.expiry_days = expiry_days

    def _get_by_email(self, email: str) -> Optional[TeacherInvitationModel]:
        return (
            self.db.query(TeacherInvitationModel)
            .filter(TeacherInvitationModel.email == email)
            .first()
        )

    def _get_by_token(self, token: str) -> Optional[TeacherInvitationModel]:
        return (
            self.db.query(TeacherInvitationModel)
            .filter(TeacherInvitationModel.token == token)
            .first()
        )

    def issue(
        self, email: str, issued_by: str, origin: Optional[str] = None
    ) -> TeacherInvitationModel:
        """Create or rotate the invitation for an email and send the link.

        Args:
            email: Address of the teacher being invited.
            issued_by: user_id of the administrator.
            origin: Front-end origin used to build the sign-up link.

        Returns:
            The stored invitation with its new token.

        Raises:
            ValidationError: If the email is empty.
            InvitationAlreadyAcceptedError: If this email already registered.
            InvitationDeliveryError: If the token was stored but the email
                could not be delivered.
        """
        email = normalize_email(email)
        if not email:
            raise ValidationError("Please enter a valid email address.")

        now = self.clock()
        token = secrets.token_urlsafe(TOKEN_BYTES)
        expires_at = (now + timedelta(days=self.expiry_days)).isoformat()

        model = self._get_by_email(email)
        if model is not None:
            if model.status == STATUS_ACCEPTED:
                raise InvitationAlreadyAcceptedError(email)
            model.token = token
            model.status = STATUS_PENDING
            model.expires_at = expires_at
            model.invited_by = issued_by
        else:
            model = TeacherInvitationModel(
                id=str(uuid.uuid4()),
                email=email,
                token=token,
                status=STATUS_PENDING,
                invited_by=issued_by,
                created_at=now.isoformat(),
                expires_at=expires_at,
            )
            self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Issued teacher invitation for %s (expires %s)", email, expires_at)

        try:
            self.email_sender.send_invitation(email, build_invite_link(token, origin))
        except EmailDeliveryError as e:
            raise InvitationDeliveryError(
                f"Invitation created for {email}, but the email could not be sent: {e}"
            ) from e
        return model

    def resend(
        self, email: str, issued_by: str, origin: Optional[str] = None
    ) -> TeacherInvitationModel:
        """Rotate the token of an invitation; same code path as issue()."""
        return self.issue(email, issued_by, origin=origin)

    def validate(self, token: str) -> InvitationValidation:
        """Check a token without using it.

        Raises:
            InvitationNotFoundError: No invitation has this token.
            InvitationAlreadyUsedError: The invitation was accepted.
            InvitationExpiredError: The invitation is past its expiry time,
                whatever its stored status says.
        """
        model = self._get_by_token(token) if token else None
        if model is None:
            raise InvitationNotFoundError()
        if model.status == STATUS_ACCEPTED:
            raise InvitationAlreadyUsedError()
        if not is_active(model, self.clock()):
            raise InvitationExpiredError()
        return InvitationValidation(email=model.email, status=STATUS_PENDING)

    def consume(self, token: str, password: str, full_name: str) -> User:
        """Register the invited teacher and close the invitation.

        The account is always bound to the invitation's email. If account
        creation fails the invitation stays pending so the same link can be
        retried.

        Raises:
            ValidationError: If the password is too short.
            UserAlreadyExistsError: If the email already has an account.
            InvitationError subclasses: See validate().
        """
        invitation = self.validate(token)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
            )

        user = self.user_manager.sign_up(
            email=invitation.email,
            password=password,
            full_name=full_name,
            role="teacher",
            is_verified=True,
        )

        model = self._get_by_token(token)
        model.status = STATUS_ACCEPTED
        self.db.commit()
        logger.info("Teacher invitation accepted: %s", invitation.email)
        return user

    def list_invitations(self) -> List[TeacherInvitationModel]:
        return (
            self.db.query(TeacherInvitationModel)
            .order_by(TeacherInvitationModel.created_at.desc())
            .all()
        )

    def now(self) -> datetime:
        return self.clock()
