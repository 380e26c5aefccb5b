"""Authentication routes.

This module handles HTTP endpoints for user authentication and registration,
and the dependencies every other router uses to resolve the caller.
"""

import logging
from datetime import datetime, timedelta
from typing import Annotated, Callable, Optional

import pytz
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

import config
from api.errors import DOMAIN_ERRORS, http_error
from core.dependencies import ChildManagerDep, UserManagerDep
from schemas.user import (
    AuthSession,
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
)
from utils.child_manager import parse_birth_date
from utils.converters import to_public_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

# HTTP Bearer token security
security = HTTPBearer()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token.

    Args:
        data: Data to encode in the token.
        expires_delta: Optional expiration time delta.

    Returns:
        Encoded JWT token string.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(pytz.utc) + expires_delta
    else:
        expire = datetime.now(pytz.utc) + timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def verify_token(credentials: HTTPAuthorizationCredentials = Depends(security)) -> dict:
    """Verify JWT token from Authorization header.

    Args:
        credentials: HTTP Bearer token credentials.

    Returns:
        Decoded token payload.

    Raises:
        HTTPException: If token is invalid or expired.
    """
    token = credentials.credentials
    try:
        payload = jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )
    if payload.get("sub") is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )
    return payload


def get_current_session(
    token_payload: dict = Depends(verify_token),
    user_manager: UserManagerDep = None,
) -> AuthSession:
    """Resolve the caller and read their role record.

    The role is read on every request, so a teacher approved or revoked by an
    admin sees the change on the next call.

    Raises:
        HTTPException: If the user no longer exists.
    """
    user = user_manager.get_user_by_id(token_payload["sub"])
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    role, is_verified = user_manager.get_role(user.user_id)
    return AuthSession(user=user, role=role, is_verified=is_verified)


CurrentSession = Annotated[AuthSession, Depends(get_current_session)]


def require_roles(*roles: str) -> Callable[..., AuthSession]:
    """Build a dependency admitting only the given roles.

    Teachers must also be verified by an administrator.
    """

    def dependency(session: CurrentSession) -> AuthSession:
        if session.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action.",
            )
        if session.role == "teacher" and not session.is_verified:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Your teacher account is pending verification by an administrator.",
            )
        return session

    return dependency


AdminSession = Annotated[AuthSession, Depends(require_roles("admin"))]
StaffSession = Annotated[AuthSession, Depends(require_roles("admin", "teacher"))]
TeacherSession = Annotated[AuthSession, Depends(require_roles("teacher"))]
ParentSession = Annotated[AuthSession, Depends(require_roles("parent"))]


@router.post("/register", summary="Register a parent or admin account")
def register(
    req: RegisterRequest,
    user_manager: UserManagerDep = None,
    child_manager: ChildManagerDep = None,
) -> dict:
    """Register a new user.

    Registration requirements:
    - Admin: Requires ADMIN_TOKEN from environment variable
    - Parent: Open sign-up, optionally with a first child
    - Teacher: Only through an invitation (see /api/invitations/accept)

    Raises:
        HTTPException: If registration fails.
    """
    if req.role == "admin":
        if not config.ADMIN_TOKEN:
            logger.error("ADMIN_TOKEN is not set in environment variables")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Admin registration is not configured. ADMIN_TOKEN not set.",
            )
        if req.admin_token != config.ADMIN_TOKEN:
            logger.warning("Admin registration rejected for %s: token mismatch", req.email)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid admin token",
            )

    try:
        if req.child is not None:
            parse_birth_date(req.child.date_of_birth)
        user = user_manager.sign_up(
            email=req.email,
            password=req.password,
            full_name=req.full_name,
            role=req.role,
            is_verified=True,
        )
        if req.role == "parent" and req.child is not None:
            child_manager.create_child(
                parent_id=user.user_id,
                name=req.child.name,
                date_of_birth=req.child.date_of_birth,
                favorite_animal=req.child.favorite_animal,
            )
    except DOMAIN_ERRORS as e:
        raise http_error(e) from e

    return {
        "success": True,
        "message": "User registered successfully",
        "user_id": user.user_id,
    }


@router.post("/login", summary="Log in with email and password")
def login(
    req: LoginRequest,
    user_manager: UserManagerDep = None,
) -> LoginResponse:
    """Login with email and password.

    Raises:
        HTTPException: If login fails.
    """
    user = user_manager.authenticate(req.email, req.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    access_token = create_access_token(data={"sub": user.user_id})
    role, is_verified = user_manager.get_role(user.user_id)
    return LoginResponse(
        user=to_public_user(user),
        role=role,
        is_verified=is_verified,
        token=access_token,
    )


@router.post("/logout", summary="Log out")
def logout() -> dict:
    """Logout endpoint.

    Note: Since we're using stateless JWT tokens, logout is handled
    client-side by removing the token. This endpoint exists for API
    consistency.
    """
    return {"success": True, "message": "Logged out successfully"}


@router.get("/me", response_model=CurrentUserResponse, summary="Current user")
def get_current_user_info(session: CurrentSession) -> CurrentUserResponse:
    return CurrentUserResponse(
        user=to_public_user(session.user),
        role=session.role,
        is_verified=session.is_verified,
    )
