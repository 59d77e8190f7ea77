from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field

from family_ledger.schemas.user import DisplayName, UserOut


class RegisterRequest(BaseModel):
    name: DisplayName
    username: str = Field(min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
    role: str | None = Field(default=None, pattern="^(member|admin)$")


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RefreshRequest(BaseModel):
    refreshToken: str = Field(min_length=1)


class PasswordUpdate(BaseModel):
    currentPassword: str = Field(min_length=1)
    newPassword: str = Field(min_length=1, max_length=128)


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    user: UserOut
    accessToken: str
    refreshToken: str


class AccessTokenResponse(BaseModel):
    success: bool = True
    accessToken: str


class UserMe(BaseModel):
    success: bool = True
    user: UserOut


class MessageResponse(BaseModel):
    success: bool = True
    message: str
