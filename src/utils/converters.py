"""Conversions between ORM rows and pydantic schemas."""

from models.user import UserModel
from schemas.user import PublicUser, User


def user_to_model(user: User) -> UserModel:
    return UserModel(
        user_id=user.user_id,
        email=user.email,
        password_hash=user.password_hash,
        full_name=user.full_name,
        created_at=user.created_at,
    )


def model_to_user(model: UserModel) -> User:
    return User(
        user_id=model.user_id,
        email=model.email,
        password_hash=model.password_hash,
        full_name=model.full_name,
        created_at=model.created_at,
    )


def to_public_user(user) -> PublicUser:
    """Strip the password hash from a User or UserModel."""
    return PublicUser(
        user_id=user.user_id,
        email=user.email,
        full_name=user.full_name,
        created_at=user.created_at,
    )
