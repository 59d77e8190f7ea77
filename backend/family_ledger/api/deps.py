from __future__ import annotations

import logging
from collections.abc import Iterator

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from family_ledger.core.errors import AuthenticationError, AuthorizationError
from family_ledger.core.security import verify_token
from family_ledger.db.session import SessionLocal
from family_ledger.models.user import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _resolve_user(cred: HTTPAuthorizationCredentials | None, db: Session) -> User:
    # HTTPBearer(auto_error=False) yields None for a missing header or a non-Bearer scheme.
    if not cred or not cred.credentials:
        raise AuthenticationError("Authentication required. Please log in.")

    payload = verify_token(cred.credentials)
    if payload is None:
        raise AuthenticationError("Invalid or expired token. Please log in again.")

    user = db.get(User, payload["userId"])
    if not user:
        raise AuthenticationError("User not found. Please log in again.")
    if not user.is_active:
        raise AuthorizationError("Your account has been deactivated. Please contact administrator.")
    return user


def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    return _resolve_user(cred, db)


def get_optional_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User | None:
    """Like get_current_user, but anonymous callers get ``None`` instead of an error."""

    if cred is None:
        return None
    try:
        return _resolve_user(cred, db)
    except HTTPException:
        return None
    except SQLAlchemyError:
        logger.warning("Optional authentication skipped: user lookup failed", exc_info=True)
        return None


def require_admin_user(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != User.ROLE_ADMIN:
        raise AuthorizationError("Access denied. Admin privileges required.")
    return current_user
