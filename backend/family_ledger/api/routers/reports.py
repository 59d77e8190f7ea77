from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from family_ledger.api.deps import get_current_user, get_db
from family_ledger.api.routers.transactions import transaction_out
from family_ledger.core import reporting
from family_ledger.models.transaction import Transaction
from family_ledger.models.user import User
from family_ledger.schemas.report import (
    CategoryTotal,
    MonthBreakdown,
    MonthlyReportOut,
    PersonTotal,
    YearlyReportOut,
)

router = APIRouter(prefix="/reports", tags=["reports"])

EXPENSE = Transaction.KIND_EXPENSE
EARNING = Transaction.KIND_EARNING


@router.get("/monthly", response_model=MonthlyReportOut)
def monthly_report(
    year: int,
    month: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> MonthlyReportOut:
    start, end = reporting.month_bounds(year, month)

    rows = db.scalars(
        select(Transaction)
        .where(Transaction.date >= start, Transaction.date < end)
        .order_by(Transaction.date.asc(), Transaction.id.asc())
    ).all()

    totals = reporting.totals_by_kind(db, start, end)

    def by_category(kind: str) -> list[CategoryTotal]:
        return [
            CategoryTotal(category=name, total=float(total), count=count)
            for name, total, count in reporting.breakdown(db, Transaction.category, kind, start, end)
        ]

    def by_person(kind: str) -> list[PersonTotal]:
        return [
            PersonTotal(paidBy=name, total=float(total), count=count)
            for name, total, count in reporting.breakdown(db, Transaction.paid_by, kind, start, end)
        ]

    expenses = totals[EXPENSE]
    earnings = totals[EARNING]

    return MonthlyReportOut(
        year=year,
        month=month,
        totalExpenses=float(expenses.total),
        totalEarnings=float(earnings.total),
        netBalance=float(earnings.total - expenses.total),
        expenseCount=expenses.count,
        earningCount=earnings.count,
        count=expenses.count + earnings.count,
        expensesByCategory=by_category(EXPENSE),
        earningsByCategory=by_category(EARNING),
        expensesByPerson=by_person(EXPENSE),
        earningsByPerson=by_person(EARNING),
        transactions=[transaction_out(r) for r in rows],
    )


@router.get("/yearly", response_model=YearlyReportOut)
def yearly_report(
    year: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> YearlyReportOut:
    months = reporting.monthly_totals(db, year)

    series: list[MonthBreakdown] = []
    total_expenses = reporting.money(0)
    total_earnings = reporting.money(0)
    for mm in range(1, 13):
        expenses = months[mm][EXPENSE]
        earnings = months[mm][EARNING]
        total_expenses += expenses.total
        total_earnings += earnings.total
        series.append(
            MonthBreakdown(
                month=mm,
                expenses=float(expenses.total),
                earnings=float(earnings.total),
                net=float(earnings.total - expenses.total),
                expenseCount=expenses.count,
                earningCount=earnings.count,
                count=expenses.count + earnings.count,
            )
        )

    return YearlyReportOut(
        year=year,
        totalExpenses=float(total_expenses),
        totalEarnings=float(total_earnings),
        netBalance=float(total_earnings - total_expenses),
        monthlyBreakdown=series,
    )
