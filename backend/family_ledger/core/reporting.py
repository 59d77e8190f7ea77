"""Aggregate queries shared by the stats and report endpoints.

Every helper works on a half-open ``[start, end)`` window of UTC-naive
datetimes; ``None`` bounds leave that side open. Sums come back as
``Decimal`` quantized to cents, never ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import extract, func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from family_ledger.core.errors import ValidationError
from family_ledger.models.transaction import Transaction

CENTS = Decimal("0.01")


@dataclass
class KindTotal:
    total: Decimal = Decimal("0.00")
    count: int = 0


def money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS)


def year_bounds(year: int) -> tuple[datetime, datetime]:
    if year < 1970 or year > 2100:
        raise ValidationError("Invalid year", fields={"year": "must be between 1970 and 2100"})
    return datetime(year, 1, 1), datetime(year + 1, 1, 1)


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    if year < 1970 or year > 2100:
        raise ValidationError("Invalid year", fields={"year": "must be between 1970 and 2100"})
    if month < 1 or month > 12:
        raise ValidationError("Invalid month", fields={"month": "must be between 1 and 12"})

    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end


def _window(start: datetime | None, end: datetime | None) -> list[ColumnElement[bool]]:
    filters: list[ColumnElement[bool]] = []
    if start is not None:
        filters.append(Transaction.date >= start)
    if end is not None:
        filters.append(Transaction.date < end)
    return filters


def totals_by_kind(
    db: Session,
    start: datetime | None = None,
    end: datetime | None = None,
) -> dict[str, KindTotal]:
    rows = db.execute(
        select(
            Transaction.kind,
            func.coalesce(func.sum(Transaction.amount), 0),
            func.count(Transaction.id),
        )
        .where(*_window(start, end))
        .group_by(Transaction.kind)
    ).all()

    totals = {kind: KindTotal() for kind in Transaction.KINDS}
    for kind, amount, count in rows:
        if kind not in totals:
            continue
        totals[kind] = KindTotal(total=money(amount), count=int(count or 0))
    return totals


def breakdown(
    db: Session,
    column,
    kind: str,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[tuple[str, Decimal, int]]:
    """Group one kind of transaction by ``column`` (category or payer).

    Ordered by total descending; ties keep whatever order the database
    returns.
    """

    total_expr = func.coalesce(func.sum(Transaction.amount), 0)
    rows = db.execute(
        select(column, total_expr, func.count(Transaction.id))
        .where(Transaction.kind == kind, *_window(start, end))
        .group_by(column)
        .order_by(total_expr.desc())
    ).all()
    return [(str(key), money(amount), int(count or 0)) for key, amount, count in rows]


def monthly_totals(db: Session, year: int) -> dict[int, dict[str, KindTotal]]:
    """Per-month totals by kind for ``year``; all twelve months are present."""

    start, end = year_bounds(year)
    month_key = extract("month", Transaction.date)
    rows = db.execute(
        select(
            month_key,
            Transaction.kind,
            func.coalesce(func.sum(Transaction.amount), 0),
            func.count(Transaction.id),
        )
        .where(*_window(start, end))
        .group_by(month_key, Transaction.kind)
    ).all()

    months = {m: {kind: KindTotal() for kind in Transaction.KINDS} for m in range(1, 13)}
    for m, kind, amount, count in rows:
        if m is None or kind not in Transaction.KINDS:
            continue
        mm = int(m)
        if mm < 1 or mm > 12:
            continue
        months[mm][kind] = KindTotal(total=money(amount), count=int(count or 0))
    return months
