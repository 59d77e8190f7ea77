from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

KIND_PATTERN = "^(expense|earning)$"


class TransactionCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(min_length=1, max_length=255)
    amount: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    category: str = Field(min_length=1, max_length=100)
    # Defaults to the creation time when omitted.
    date: datetime | None = None
    paidBy: str = Field(min_length=1, max_length=100)
    kind: str = Field(default="expense", pattern=KIND_PATTERN)


class TransactionUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str | None = Field(default=None, min_length=1, max_length=255)
    amount: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    date: datetime | None = None
    paidBy: str | None = Field(default=None, min_length=1, max_length=100)
    kind: str | None = Field(default=None, pattern=KIND_PATTERN)


class TransactionOut(BaseModel):
    id: int
    description: str
    amount: float
    category: str
    date: datetime
    paidBy: str
    kind: str
    createdAt: datetime
    updatedAt: datetime


class TransactionEnvelope(BaseModel):
    success: bool = True
    data: TransactionOut


class TransactionListOut(BaseModel):
    success: bool = True
    count: int
    data: list[TransactionOut]
