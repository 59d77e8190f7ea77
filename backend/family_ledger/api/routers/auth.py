from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from family_ledger.api.deps import get_current_user, get_db, get_optional_user
from family_ledger.core.datetime_utils import as_utc, utc_now
from family_ledger.core.errors import AuthenticationError, AuthorizationError, ConflictError
from family_ledger.core.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
    verify_token,
)
from family_ledger.models.user import User
from family_ledger.schemas.auth import (
    AccessTokenResponse,
    AuthResponse,
    LoginRequest,
    MessageResponse,
    PasswordUpdate,
    RefreshRequest,
    RegisterRequest,
    UserMe,
)
from family_ledger.schemas.user import UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

DEACTIVATED_MESSAGE = "Your account has been deactivated"
DUPLICATE_MESSAGE = "Username or email already exists"


def user_out(user: User) -> UserOut:
    # Never expose password_hash or refresh_token.
    return UserOut(
        id=user.id,
        name=user.name,
        username=user.username,
        email=user.email,
        role=user.role,
        isActive=user.is_active,
        lastLogin=as_utc(user.last_login) if user.last_login is not None else None,
        createdAt=as_utc(user.created_at),
    )


def _issue_tokens(db: Session, user: User) -> tuple[str, str]:
    access_token = create_access_token(user.id, user.role)
    refresh_token = create_refresh_token(user.id)
    # A new refresh token supersedes the previous one.
    user.refresh_token = refresh_token
    db.add(user)
    return access_token, refresh_token


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    caller: User | None = Depends(get_optional_user),
) -> AuthResponse:
    existing = db.scalar(
        select(User).where(or_(User.username == payload.username, User.email == payload.email))
    )
    if existing:
        raise ConflictError(DUPLICATE_MESSAGE)

    role = payload.role or User.ROLE_MEMBER
    if role == User.ROLE_ADMIN:
        # The very first account bootstraps the deployment; afterwards only admins mint admins.
        has_users = db.scalar(select(func.count(User.id))) or 0
        if has_users and (caller is None or caller.role != User.ROLE_ADMIN):
            raise AuthorizationError("Only administrators can create admin accounts")

    user = User(
        name=payload.name,
        username=payload.username,
        email=str(payload.email),
        password_hash=hash_password(payload.password),
        role=role,
        is_active=True,
    )
    db.add(user)
    try:
        db.flush()
        access_token, refresh_token = _issue_tokens(db, user)
        db.commit()
    except IntegrityError:
        # Another registration claimed the username or email after the pre-check.
        db.rollback()
        raise ConflictError(DUPLICATE_MESSAGE)
    db.refresh(user)

    logger.info("Registered user id=%s username=%s role=%s", user.id, user.username, user.role)
    return AuthResponse(
        message="User registered successfully",
        user=user_out(user),
        accessToken=access_token,
        refreshToken=refresh_token,
    )


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> AuthResponse:
    user = db.scalar(select(User).where(User.username == payload.username))
    if not user:
        logger.info("Login failed: unknown username %s", payload.username)
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        raise AuthorizationError(DEACTIVATED_MESSAGE)

    if not verify_password(payload.password, user.password_hash):
        logger.info("Login failed: bad password for user id=%s", user.id)
        raise AuthenticationError("Invalid credentials")

    user.last_login = utc_now()
    access_token, refresh_token = _issue_tokens(db, user)
    db.commit()
    db.refresh(user)

    return AuthResponse(
        message="Login successful",
        user=user_out(user),
        accessToken=access_token,
        refreshToken=refresh_token,
    )


@router.post("/refresh", response_model=AccessTokenResponse)
def refresh(payload: RefreshRequest, db: Session = Depends(get_db)) -> AccessTokenResponse:
    decoded = verify_token(payload.refreshToken)
    if decoded is None:
        raise AuthenticationError("Invalid refresh token")

    user = db.get(User, decoded["userId"])
    if not user or user.refresh_token != payload.refreshToken:
        raise AuthenticationError("Invalid refresh token")

    if not user.is_active:
        raise AuthorizationError(DEACTIVATED_MESSAGE)

    return AccessTokenResponse(accessToken=create_access_token(user.id, user.role))


@router.post("/logout", response_model=MessageResponse)
def logout(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    current_user.refresh_token = None
    db.add(current_user)
    db.commit()
    return MessageResponse(message="Logout successful")


@router.get("/me", response_model=UserMe)
def me(current_user: User = Depends(get_current_user)) -> UserMe:
    return UserMe(user=user_out(current_user))


@router.put("/password", response_model=MessageResponse)
def update_password(
    payload: PasswordUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    if not verify_password(payload.currentPassword, current_user.password_hash):
        raise AuthenticationError("Current password is incorrect")

    current_user.password_hash = hash_password(payload.newPassword)
    db.add(current_user)
    db.commit()
    logger.info("Password updated for user id=%s", current_user.id)
    return MessageResponse(message="Password updated successfully")
