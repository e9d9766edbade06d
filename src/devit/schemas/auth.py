"""Sign-up, sign-in and admin login payloads."""

import uuid

from pydantic import Field

from devit.schemas.base import CamelModel


class SignUpRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=39, pattern=r"^[A-Za-z0-9_-]+$")
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    full_name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class SignInRequest(CamelModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class AdminLoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthUser(CamelModel):
    id: uuid.UUID
    username: str
    email: str
    full_name: str | None = None


class AuthResponse(CamelModel):
    success: bool = True
    token: str
    user: AuthUser


class AdminUser(CamelModel):
    id: str
    username: str
    role: str = "Administrator"


class AdminAuthResponse(CamelModel):
    success: bool = True
    token: str
    user: AdminUser
