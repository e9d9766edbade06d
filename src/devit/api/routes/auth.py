"""Sign-up, sign-in and administrator login."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devit.core.database import get_db
from devit.schemas.auth import (
    AdminAuthResponse,
    AdminLoginRequest,
    AdminUser,
    AuthResponse,
    AuthUser,
    SignInRequest,
    SignUpRequest,
)
from devit.services.auth import AuthService, admin_login

router = APIRouter(tags=["auth"])


@router.post("/auth/signup", response_model=AuthResponse)
async def sign_up(data: SignUpRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    user, token = await AuthService(db).sign_up(
        username=data.username,
        email=data.email,
        full_name=data.full_name,
        password=data.password,
    )
    return AuthResponse(token=token, user=AuthUser.model_validate(user))


@router.post("/auth/signin", response_model=AuthResponse)
async def sign_in(data: SignInRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    user, token = await AuthService(db).sign_in(data.email, data.password)
    return AuthResponse(token=token, user=AuthUser.model_validate(user))


@router.post("/admin/auth/login", response_model=AdminAuthResponse)
async def login_admin(data: AdminLoginRequest) -> AdminAuthResponse:
    admin_id, token = admin_login(data.username, data.password)
    return AdminAuthResponse(token=token, user=AdminUser(id=admin_id, username=data.username))
