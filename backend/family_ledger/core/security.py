from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from family_ledger.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def _encode(claims: dict[str, Any], expires_delta: timedelta) -> str:
    to_encode = dict(claims)
    to_encode["exp"] = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: int, role: str, expires_delta: timedelta | None = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_access_expire_minutes)
    return _encode({"userId": int(user_id), "role": role}, expires_delta)


def create_refresh_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(days=settings.jwt_refresh_expire_days)
    return _encode({"userId": int(user_id)}, expires_delta)


def verify_token(token: str) -> dict[str, Any] | None:
    """Decode a signed token.

    Every failure (malformed, bad signature, expired, missing userId) yields
    ``None`` so callers treat them identically.
    """

    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    if not isinstance(payload.get("userId"), int):
        return None
    return payload
