from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Unicode
from sqlalchemy.orm import Mapped, mapped_column

from family_ledger.core.datetime_utils import utc_now
from family_ledger.models.base import Base


class User(Base):
    __tablename__ = "users"

    ROLE_ADMIN = "admin"
    ROLE_MEMBER = "member"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    name: Mapped[str] = mapped_column(Unicode(100))
    username: Mapped[str] = mapped_column(String(30), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))

    # 'member' | 'admin'
    role: Mapped[str] = mapped_column(String(10), default=ROLE_MEMBER)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    # Only the latest issued refresh token is accepted.
    refresh_token: Mapped[str | None] = mapped_column(String(512), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utc_now, onupdate=utc_now)
