from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from family_ledger.api.deps import get_db, require_admin_user
from family_ledger.api.routers.auth import user_out
from family_ledger.core.errors import ConflictError, NotFoundError, ValidationError
from family_ledger.core.security import hash_password
from family_ledger.models.user import User
from family_ledger.schemas.user import UserEnvelope, UserListOut, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserListOut)
def list_users(
    db: Session = Depends(get_db),
    _: User = Depends(require_admin_user),
) -> UserListOut:
    rows = db.scalars(select(User).order_by(User.id.asc())).all()
    return UserListOut(count=len(rows), data=[user_out(r) for r in rows])


@router.get("/{user_id}", response_model=UserEnvelope)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin_user),
) -> UserEnvelope:
    row = db.get(User, user_id)
    if not row:
        raise NotFoundError("User not found")
    return UserEnvelope(data=user_out(row))


@router.patch("/{user_id}", response_model=UserEnvelope)
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(require_admin_user),
) -> UserEnvelope:
    row = db.get(User, user_id)
    if not row:
        raise NotFoundError("User not found")

    next_role = payload.role if payload.role is not None else row.role
    next_active = payload.isActive if payload.isActive is not None else row.is_active

    # Safety: avoid locking yourself out from admin.
    if row.id == current_admin.id:
        if next_role != User.ROLE_ADMIN:
            raise ValidationError("Cannot change your own role")
        if next_active is False:
            raise ValidationError("Cannot disable your own account")

    # Safety: keep at least one active admin.
    if row.role == User.ROLE_ADMIN and row.is_active and (next_role != User.ROLE_ADMIN or not next_active):
        active_admin_count = db.scalar(
            select(func.count(User.id)).where(User.role == User.ROLE_ADMIN, User.is_active == True)  # noqa: E712
        )
        if active_admin_count is not None and int(active_admin_count) <= 1:
            raise ValidationError("At least one active admin is required")

    if payload.email is not None and str(payload.email) != row.email:
        taken = db.scalar(select(User.id).where(User.email == str(payload.email), User.id != row.id))
        if taken is not None:
            raise ConflictError("Email already exists")
        row.email = str(payload.email)

    if payload.name is not None:
        row.name = payload.name

    if payload.password is not None:
        row.password_hash = hash_password(payload.password)

    row.role = next_role
    row.is_active = next_active
    if not next_active:
        # A deactivated account must not be able to mint new access tokens.
        row.refresh_token = None

    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already exists")
    db.refresh(row)

    logger.info(
        "User id=%s updated by admin id=%s (role=%s, active=%s)",
        row.id,
        current_admin.id,
        row.role,
        row.is_active,
    )
    return UserEnvelope(data=user_out(row))
