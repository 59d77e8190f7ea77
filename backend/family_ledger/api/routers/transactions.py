from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from family_ledger.api.deps import get_current_user, get_db
from family_ledger.core import reporting
from family_ledger.core.datetime_utils import as_utc, to_utc_naive, utc_now
from family_ledger.core.errors import NotFoundError, ValidationError
from family_ledger.models.transaction import Transaction
from family_ledger.models.user import User
from family_ledger.schemas.report import CategoryTotal, SummaryStatsOut
from family_ledger.schemas.transaction import (
    TransactionCreate,
    TransactionEnvelope,
    TransactionListOut,
    TransactionOut,
    TransactionUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])

SORTABLE_FIELDS = {
    "id": Transaction.id,
    "date": Transaction.date,
    "amount": Transaction.amount,
    "category": Transaction.category,
    "paidBy": Transaction.paid_by,
    "description": Transaction.description,
    "kind": Transaction.kind,
    "createdAt": Transaction.created_at,
}


def transaction_out(row: Transaction) -> TransactionOut:
    return TransactionOut(
        id=row.id,
        description=row.description,
        amount=float(reporting.money(row.amount)),
        category=row.category,
        date=as_utc(row.date),
        paidBy=row.paid_by,
        kind=row.kind,
        createdAt=as_utc(row.created_at),
        updatedAt=as_utc(row.updated_at),
    )


def parse_sort(sort: str | None) -> list:
    """Turn ``"-amount,category"`` into ORDER BY clauses; default is newest first."""

    if not sort or not sort.strip():
        return [Transaction.date.desc()]

    clauses = []
    for raw in sort.split(","):
        field = raw.strip()
        if not field:
            continue
        descending = field.startswith("-")
        name = field[1:] if descending else field
        column = SORTABLE_FIELDS.get(name)
        if column is None:
            raise ValidationError(f"Cannot sort by '{name}'", fields={"sort": f"unknown field '{name}'"})
        clauses.append(column.desc() if descending else column.asc())

    return clauses or [Transaction.date.desc()]


def _get_or_404(db: Session, tx_id: int) -> Transaction:
    row = db.get(Transaction, tx_id)
    if not row:
        raise NotFoundError("Transaction not found")
    return row


@router.get("", response_model=TransactionListOut)
def list_transactions(
    category: str | None = None,
    paidBy: str | None = None,
    kind: str | None = None,
    startDate: datetime | None = None,
    endDate: datetime | None = None,
    sort: str | None = None,
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> TransactionListOut:
    if kind is not None and kind not in Transaction.KINDS:
        raise ValidationError("Invalid kind", fields={"kind": "must be 'expense' or 'earning'"})

    filters = []
    if category:
        filters.append(Transaction.category.contains(category, autoescape=True))
    if paidBy:
        filters.append(Transaction.paid_by.contains(paidBy, autoescape=True))
    if kind is not None:
        filters.append(Transaction.kind == kind)
    if startDate is not None:
        filters.append(Transaction.date >= to_utc_naive(startDate))
    if endDate is not None:
        filters.append(Transaction.date <= to_utc_naive(endDate))

    stmt = select(Transaction).where(*filters).order_by(*parse_sort(sort))
    if limit is not None:
        stmt = stmt.limit(limit)

    rows = db.scalars(stmt).all()
    return TransactionListOut(count=len(rows), data=[transaction_out(r) for r in rows])


@router.get("/stats", response_model=SummaryStatsOut)
def transaction_stats(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> SummaryStatsOut:
    now = utc_now()
    month_start, _month_end = reporting.month_bounds(now.year, now.month)

    overall = reporting.totals_by_kind(db)
    current = reporting.totals_by_kind(db, start=month_start, end=None)

    def by_category(kind: str) -> list[CategoryTotal]:
        return [
            CategoryTotal(category=name, total=float(total), count=count)
            for name, total, count in reporting.breakdown(db, Transaction.category, kind)
        ]

    expenses = overall[Transaction.KIND_EXPENSE].total
    earnings = overall[Transaction.KIND_EARNING].total
    month_expenses = current[Transaction.KIND_EXPENSE].total
    month_earnings = current[Transaction.KIND_EARNING].total

    return SummaryStatsOut(
        totalExpenses=float(expenses),
        totalEarnings=float(earnings),
        netBalance=float(earnings - expenses),
        currentMonthExpenses=float(month_expenses),
        currentMonthEarnings=float(month_earnings),
        currentMonthNet=float(month_earnings - month_expenses),
        expensesByCategory=by_category(Transaction.KIND_EXPENSE),
        earningsByCategory=by_category(Transaction.KIND_EARNING),
    )


@router.post("", response_model=TransactionEnvelope, status_code=201)
def create_transaction(
    payload: TransactionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TransactionEnvelope:
    row = Transaction(
        description=payload.description,
        amount=payload.amount,
        category=payload.category,
        date=to_utc_naive(payload.date) if payload.date is not None else utc_now(),
        paid_by=payload.paidBy,
        kind=payload.kind,
    )
    db.add(row)
    db.commit()
    db.refresh(row)

    logger.info("Transaction id=%s (%s) created by user id=%s", row.id, row.kind, current_user.id)
    return TransactionEnvelope(data=transaction_out(row))


@router.get("/{tx_id}", response_model=TransactionEnvelope)
def get_transaction(
    tx_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> TransactionEnvelope:
    return TransactionEnvelope(data=transaction_out(_get_or_404(db, tx_id)))


@router.put("/{tx_id}", response_model=TransactionEnvelope)
def update_transaction(
    tx_id: int,
    payload: TransactionUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> TransactionEnvelope:
    row = _get_or_404(db, tx_id)

    if payload.description is not None:
        row.description = payload.description
    if payload.amount is not None:
        row.amount = payload.amount
    if payload.category is not None:
        row.category = payload.category
    if payload.date is not None:
        row.date = to_utc_naive(payload.date)
    if payload.paidBy is not None:
        row.paid_by = payload.paidBy
    if payload.kind is not None:
        row.kind = payload.kind

    db.add(row)
    db.commit()
    db.refresh(row)

    return TransactionEnvelope(data=transaction_out(row))


@router.delete("/{tx_id}")
def delete_transaction(
    tx_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    row = _get_or_404(db, tx_id)
    db.delete(row)
    db.commit()

    logger.info("Transaction id=%s deleted by user id=%s", tx_id, current_user.id)
    return {"success": True, "data": {}}
