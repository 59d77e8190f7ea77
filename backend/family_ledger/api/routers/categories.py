from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from family_ledger.api.deps import get_current_user, get_db
from family_ledger.core.datetime_utils import as_utc
from family_ledger.core.errors import ConflictError, NotFoundError
from family_ledger.models.category import Category
from family_ledger.models.user import User
from family_ledger.schemas.category import (
    CategoryCreate,
    CategoryEnvelope,
    CategoryListOut,
    CategoryOut,
    CategoryUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["categories"])

DUPLICATE_MESSAGE = "Category name already exists"


def _category_out(row: Category) -> CategoryOut:
    return CategoryOut(
        id=row.id,
        name=row.name,
        description=row.description,
        color=row.color,
        icon=row.icon,
        isActive=row.is_active,
        createdAt=as_utc(row.created_at),
        updatedAt=as_utc(row.updated_at),
    )


def _get_or_404(db: Session, category_id: int) -> Category:
    row = db.get(Category, category_id)
    if not row:
        raise NotFoundError("Category not found")
    return row


def _ensure_name_free(db: Session, name: str, exclude_id: int | None = None) -> None:
    stmt = select(Category.id).where(Category.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Category.id != exclude_id)
    if db.scalar(stmt.limit(1)) is not None:
        raise ConflictError(DUPLICATE_MESSAGE)


def _commit(db: Session) -> None:
    # Another writer may claim the name after the pre-check.
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_MESSAGE)


@router.get("", response_model=CategoryListOut)
def list_categories(
    isActive: bool | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> CategoryListOut:
    stmt: Select[tuple[Category]] = select(Category)
    if isActive is not None:
        stmt = stmt.where(Category.is_active == isActive)
    if search:
        stmt = stmt.where(Category.name.contains(search, autoescape=True))

    rows = db.scalars(stmt.order_by(Category.name.asc())).all()
    return CategoryListOut(count=len(rows), data=[_category_out(r) for r in rows])


@router.get("/{category_id}", response_model=CategoryEnvelope)
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> CategoryEnvelope:
    return CategoryEnvelope(data=_category_out(_get_or_404(db, category_id)))


@router.post("", response_model=CategoryEnvelope, status_code=201)
def create_category(
    payload: CategoryCreate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> CategoryEnvelope:
    _ensure_name_free(db, payload.name)

    row = Category(
        name=payload.name,
        description=payload.description,
        color=payload.color,
        icon=payload.icon,
        is_active=payload.isActive,
    )
    db.add(row)
    _commit(db)
    db.refresh(row)

    logger.info("Created category id=%s name=%s", row.id, row.name)
    return CategoryEnvelope(data=_category_out(row))


@router.put("/{category_id}", response_model=CategoryEnvelope)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> CategoryEnvelope:
    row = _get_or_404(db, category_id)

    if payload.name is not None and payload.name != row.name:
        _ensure_name_free(db, payload.name, exclude_id=row.id)
        row.name = payload.name
    # An explicit null clears the optional fields; an omitted field is left alone.
    if "description" in payload.model_fields_set:
        row.description = payload.description
    if payload.color is not None:
        row.color = payload.color
    if "icon" in payload.model_fields_set:
        row.icon = payload.icon
    if payload.isActive is not None:
        row.is_active = payload.isActive

    db.add(row)
    _commit(db)
    db.refresh(row)

    return CategoryEnvelope(data=_category_out(row))


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> dict:
    row = _get_or_404(db, category_id)

    # Transactions keep their free-text category label; nothing cascades.
    db.delete(row)
    db.commit()

    logger.info("Deleted category id=%s", category_id)
    return {"success": True, "data": {}}


@router.patch("/{category_id}/toggle", response_model=CategoryEnvelope)
def toggle_category(
    category_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> CategoryEnvelope:
    row = _get_or_404(db, category_id)

    row.is_active = not row.is_active
    db.add(row)
    db.commit()
    db.refresh(row)

    return CategoryEnvelope(data=_category_out(row))
