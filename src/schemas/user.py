"""User schema definitions.

This module defines the User data model and the request/response models of
the authentication routes.
"""

import uuid
from datetime import datetime
from typing import Literal, Optional

import pytz
from pydantic import BaseModel, EmailStr, Field

Role = Literal["admin", "teacher", "parent"]


class User(BaseModel):
    user_id: str = Field(
        description="The unique identifier for the user.",
        default_factory=lambda: str(uuid.uuid4()),
    )
    email: str = Field(description="Login email; unique across users.")
    password_hash: str = Field(description="bcrypt hash of the password.")
    full_name: str = Field(description="Display name.")
    created_at: str = Field(
        description="The time when the user was created.",
        default_factory=lambda: datetime.now(pytz.utc).isoformat(),
    )


class PublicUser(BaseModel):
    """User information safe to return to clients."""

    user_id: str
    email: str
    full_name: str
    created_at: str


class AuthSession(BaseModel):
    """Who is calling, resolved once per request from the role record.

    ``role`` and ``is_verified`` are read from the store on every request,
    never cached across requests.
    """

    user: User
    role: Optional[Role] = None
    is_verified: bool = False

    @property
    def user_id(self) -> str:
        return self.user.user_id


class ChildSignup(BaseModel):
    name: str = Field(min_length=1)
    date_of_birth: str = Field(description="YYYY-MM-DD")
    favorite_animal: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    """Self sign-up: parents, or admins holding the ADMIN_TOKEN."""

    email: EmailStr
    password: str
    full_name: str = Field(min_length=1)
    role: Literal["parent", "admin"] = "parent"
    admin_token: Optional[str] = None
    child: Optional[ChildSignup] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    user: PublicUser
    role: Optional[Role]
    is_verified: bool
    token: str


class CurrentUserResponse(BaseModel):
    user: PublicUser
    role: Optional[Role]
    is_verified: bool


class UserWithRole(PublicUser):
    role: Optional[Role] = None
    is_verified: bool = False


class SetVerificationRequest(BaseModel):
    is_verified: bool
