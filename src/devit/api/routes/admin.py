"""Administrator console endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from devit.api.deps import get_current_admin
from devit.core.database import get_db
from devit.repositories.base import PaginationParams
from devit.schemas.user import AdminUsersEnvelope, DashboardStats
from devit.services.admin import AdminService

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("/users", response_model=AdminUsersEnvelope)
async def list_users(
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
) -> AdminUsersEnvelope:
    users, total = await AdminService(db).list_users(PaginationParams(offset=offset, limit=limit))
    return AdminUsersEnvelope(users=users, total=total)


@router.get("/dashboard/stats", response_model=DashboardStats)
async def dashboard_stats(
    db: AsyncSession = Depends(get_db),
) -> DashboardStats:
    return await AdminService(db).dashboard_stats()
