"""User management utilities.

This module is the portal's identity provider: password hashing, account
creation, role and verification records, and login checks.
"""

import logging
from typing import List, Optional, Tuple

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import MIN_PASSWORD_LENGTH
from core.exceptions import RecordNotFoundError, ValidationError
from models.child import ChildModel
from models.class_model import ClassMemberModel
from models.user import UserModel, UserRoleModel
from schemas.user import User
from utils.converters import model_to_user, user_to_model

logger = logging.getLogger(__name__)

# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS = 12

VALID_ROLES = ("admin", "teacher", "parent")


class UserNotFoundError(Exception):
    """Exception raised when a user is not found."""

    pass


class UserAlreadyExistsError(Exception):
    """Exception raised when trying to create a user that already exists."""

    pass


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserManager:
    """Manages user data persistence and operations using SQLAlchemy."""

    def __init__(self, db: Session, bcrypt_rounds: int = BCRYPT_ROUNDS):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
            bcrypt_rounds: Cost factor for new password hashes.
        """
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password.

        Returns:
            Hashed password (bcrypt hash string).
        """
        # Truncate password if it exceeds bcrypt's 72-byte limit
        password_bytes = password.encode("utf-8")
        if len(password_bytes) > 72:
            logger.warning("Password exceeds 72 bytes, truncating")
            password_bytes = password_bytes[:72]

        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(password_bytes, salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            plain_password: Plain text password to verify.
            hashed_password: Bcrypt hash string to verify against.

        Returns:
            True if password matches, False otherwise.
        """
        password_bytes = plain_password.encode("utf-8")[:72]
        try:
            return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))
        except ValueError as e:
            logger.error("Password verification error: %s", e)
            return False

    def sign_up(
        self,
        email: str,
        password: str,
        full_name: str,
        role: str,
        is_verified: bool = False,
    ) -> User:
        """Create a new account together with its role record.

        Args:
            email: Login email; must not be in use.
            password: Plain text password, at least MIN_PASSWORD_LENGTH long.
            full_name: Display name.
            role: 'admin', 'teacher', or 'parent'.
            is_verified: Initial verification flag of the role record.

        Returns:
            Created User object.

        Raises:
            ValidationError: If the password is too short or the role unknown.
            UserAlreadyExistsError: If the email already has an account.
        """
        if role not in VALID_ROLES:
            raise ValidationError(f"Invalid role: {role}")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
            )

        email = normalize_email(email)
        existing = self.db.query(UserModel).filter(UserModel.email == email).first()
        if existing:
            raise UserAlreadyExistsError(f"An account for '{email}' already exists")

        user = User(
            email=email,
            password_hash=self.hash_password(password),
            full_name=full_name.strip(),
        )
        role_model = UserRoleModel(
            user_id=user.user_id,
            role=role,
            is_verified=is_verified,
            created_at=user.created_at,
        )

        # Two concurrent sign-ups can both pass the check above; the unique
        # constraint on email decides.
        try:
            self.db.add(user_to_model(user))
            self.db.add(role_model)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise UserAlreadyExistsError(f"An account for '{email}' already exists") from e

        logger.info("Created %s account: %s", role, email)
        return user

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user for valid credentials, None otherwise."""
        user = self.get_user_by_email(email)
        if user is None or not self.verify_password(password, user.password_hash):
            return None
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email (exact match after normalisation).

        Args:
            email: Email to look up.

        Returns:
            User object if found, None otherwise.
        """
        model = (
            self.db.query(UserModel)
            .filter(UserModel.email == normalize_email(email))
            .first()
        )
        if model:
            return model_to_user(model)
        return None

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        model = self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
        if model:
            return model_to_user(model)
        return None

    def get_role(self, user_id: str) -> Tuple[Optional[str], bool]:
        """Read the role record of a user.

        Admins and parents are always verified; teachers need admin approval.

        Returns:
            Tuple of (role, is_verified); (None, False) without a role record.
        """
        model = (
            self.db.query(UserRoleModel)
            .filter(UserRoleModel.user_id == user_id)
            .first()
        )
        if model is None:
            return None, False
        verified = model.role in ("admin", "parent") or bool(model.is_verified)
        return model.role, verified

    def list_users(self) -> List[Tuple[UserModel, Optional[UserRoleModel]]]:
        """List all users with their role record, newest first."""
        return (
            self.db.query(UserModel, UserRoleModel)
            .outerjoin(UserRoleModel, UserRoleModel.user_id == UserModel.user_id)
            .order_by(UserModel.created_at.desc())
            .all()
        )

    def list_users_by_role(self, role: str) -> List[Tuple[UserModel, UserRoleModel]]:
        return (
            self.db.query(UserModel, UserRoleModel)
            .join(UserRoleModel, UserRoleModel.user_id == UserModel.user_id)
            .filter(UserRoleModel.role == role)
            .order_by(UserModel.full_name)
            .all()
        )

    def set_teacher_verified(self, user_id: str, is_verified: bool) -> None:
        """Approve or revoke a teacher account.

        Raises:
            RecordNotFoundError: If the user has no teacher role record.
        """
        model = (
            self.db.query(UserRoleModel)
            .filter(UserRoleModel.user_id == user_id, UserRoleModel.role == "teacher")
            .first()
        )
        if model is None:
            raise RecordNotFoundError("Teacher", user_id)
        model.is_verified = is_verified
        self.db.commit()
        logger.info("Set teacher %s verified=%s", user_id, is_verified)

    def delete_user(self, user_id: str) -> None:
        """Remove a user with their role record and class memberships.

        Children still linked to the user are left unlinked; delete them first
        with ChildManager.delete_children_for_parent to remove them as well.

        Raises:
            UserNotFoundError: If no such user exists.
        """
        model = self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
        if model is None:
            raise UserNotFoundError(user_id)
        self.db.query(ChildModel).filter(ChildModel.parent_id == user_id).update(
            {ChildModel.parent_id: None}
        )
        self.db.query(ClassMemberModel).filter(ClassMemberModel.user_id == user_id).delete()
        self.db.query(UserRoleModel).filter(UserRoleModel.user_id == user_id).delete()
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted user: %s", user_id)

    def display_names(self, user_ids) -> dict:
        """Map user ids to full names for the given ids."""
        ids = {uid for uid in user_ids if uid}
        if not ids:
            return {}
        rows = (
            self.db.query(UserModel.user_id, UserModel.full_name)
            .filter(UserModel.user_id.in_(ids))
            .all()
        )
        return {row.user_id: row.full_name for row in rows}
