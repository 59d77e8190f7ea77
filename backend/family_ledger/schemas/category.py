from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

HEX_COLOR_PATTERN = "^#[0-9A-Fa-f]{6}$"


class CategoryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=255)
    color: str = Field(default="#3498db", pattern=HEX_COLOR_PATTERN)
    icon: str | None = Field(default=None, max_length=32)
    isActive: bool = True


class CategoryUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=255)
    color: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN)
    icon: str | None = Field(default=None, max_length=32)
    isActive: bool | None = None


class CategoryOut(BaseModel):
    id: int
    name: str
    description: str | None
    color: str
    icon: str | None
    isActive: bool
    createdAt: datetime
    updatedAt: datetime


class CategoryEnvelope(BaseModel):
    success: bool = True
    data: CategoryOut


class CategoryListOut(BaseModel):
    success: bool = True
    count: int
    data: list[CategoryOut]
