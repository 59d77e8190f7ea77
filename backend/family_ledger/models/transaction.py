from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Integer, Numeric, String, Unicode
from sqlalchemy.orm import Mapped, mapped_column

from family_ledger.core.datetime_utils import utc_now
from family_ledger.models.base import Base


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_transactions_amount_non_negative"),
        CheckConstraint("kind IN ('expense', 'earning')", name="ck_transactions_kind"),
    )

    KIND_EXPENSE = "expense"
    KIND_EARNING = "earning"
    KINDS = (KIND_EXPENSE, KIND_EARNING)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    description: Mapped[str] = mapped_column(Unicode(255))
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    # Free-text label, not a foreign key to categories.
    category: Mapped[str] = mapped_column(Unicode(100), index=True)

    date: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utc_now, index=True)
    paid_by: Mapped[str] = mapped_column(Unicode(100), index=True)

    # 'expense' | 'earning'
    kind: Mapped[str] = mapped_column(String(10), default=KIND_EXPENSE, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utc_now, onupdate=utc_now)
