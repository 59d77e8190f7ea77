from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Unicode
from sqlalchemy.orm import Mapped, mapped_column

from family_ledger.core.datetime_utils import utc_now
from family_ledger.models.base import Base


class Category(Base):
    __tablename__ = "categories"

    DEFAULT_COLOR = "#3498db"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    name: Mapped[str] = mapped_column(Unicode(100), unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Unicode(255), nullable=True)

    # '#RRGGBB'
    color: Mapped[str] = mapped_column(String(7), default=DEFAULT_COLOR)
    # Unicode so emoji icons survive the round trip.
    icon: Mapped[str | None] = mapped_column(Unicode(32), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utc_now, onupdate=utc_now)
