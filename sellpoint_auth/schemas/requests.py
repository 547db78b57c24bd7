from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

BanScopeName = Literal["comments", "orders", "login", "messaging"]


class LoginIn(BaseModel):
    login: str = Field(..., description="Email or username", min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class PasswordResetRequestIn(BaseModel):
    login: str = Field(..., description="Email or username", min_length=1, max_length=255)


class PasswordResetVerifyIn(BaseModel):
    reset_token: str = Field(..., min_length=1, max_length=64)
    code: str = Field(..., min_length=1, max_length=16)


class PasswordResetCommitIn(BaseModel):
    access_code: str = Field(..., min_length=1, max_length=64)
    new_password: str = Field(..., min_length=6, max_length=72)


class CodeIn(BaseModel):
    code: str = Field(..., min_length=1, max_length=16)


class BanCreateIn(BaseModel):
    user_id: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1, max_length=500)
    banned_until: datetime | None = None
    scopes: list[BanScopeName] = Field(default_factory=lambda: ["comments"], min_length=1)


class RegisterIn(BaseModel):
    email: EmailStr = Field(..., description="The email of the user", max_length=255)
    password: str = Field(..., description="The password of the user", min_length=8, max_length=72)
