from __future__ import annotations

from pydantic import BaseModel, Field

from family_ledger.schemas.transaction import TransactionOut


class CategoryTotal(BaseModel):
    category: str
    total: float
    count: int


class PersonTotal(BaseModel):
    paidBy: str
    total: float
    count: int


class SummaryStatsOut(BaseModel):
    success: bool = True
    totalExpenses: float
    totalEarnings: float
    netBalance: float
    currentMonthExpenses: float
    currentMonthEarnings: float
    currentMonthNet: float
    expensesByCategory: list[CategoryTotal]
    earningsByCategory: list[CategoryTotal]


class MonthlyReportOut(BaseModel):
    success: bool = True
    year: int
    month: int = Field(ge=1, le=12)
    totalExpenses: float
    totalEarnings: float
    netBalance: float
    expenseCount: int
    earningCount: int
    count: int
    expensesByCategory: list[CategoryTotal]
    earningsByCategory: list[CategoryTotal]
    expensesByPerson: list[PersonTotal]
    earningsByPerson: list[PersonTotal]
    transactions: list[TransactionOut]


class MonthBreakdown(BaseModel):
    month: int = Field(ge=1, le=12)
    expenses: float
    earnings: float
    net: float
    expenseCount: int
    earningCount: int
    count: int


class YearlyReportOut(BaseModel):
    success: bool = True
    year: int
    totalExpenses: float
    totalEarnings: float
    netBalance: float
    monthlyBreakdown: list[MonthBreakdown]
