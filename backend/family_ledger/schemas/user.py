from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, EmailStr, Field, StringConstraints

DisplayName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


class UserOut(BaseModel):
    id: int
    name: str
    username: str
    email: str
    role: str
    isActive: bool
    lastLogin: datetime | None
    createdAt: datetime


class UserUpdate(BaseModel):
    name: DisplayName | None = None
    email: EmailStr | None = None
    role: str | None = Field(default=None, pattern="^(member|admin)$")
    isActive: bool | None = None
    password: str | None = Field(default=None, min_length=1, max_length=128)


class UserEnvelope(BaseModel):
    success: bool = True
    data: UserOut


class UserListOut(BaseModel):
    success: bool = True
    count: int
    data: list[UserOut]
