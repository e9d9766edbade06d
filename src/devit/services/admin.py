"""Administrator console: platform totals and the user table."""

from sqlalchemy.ext.asyncio import AsyncSession

from devit.core.logging import get_logger
from devit.repositories.base import PaginationParams
from devit.repositories.issue import IssueRepository
from devit.repositories.repository import RepoRepository
from devit.repositories.user import UserRepository
from devit.schemas.user import AdminUserRow, DashboardStats
from devit.services.timefmt import as_utc, relative_time

logger = get_logger(__name__)


class AdminService:
    def __init__(self, session: AsyncSession) -> None:
        self._users = UserRepository(session)
        self._repos = RepoRepository(session)
        self._issues = IssueRepository(session)

    async def dashboard_stats(self) -> DashboardStats:
        """Live row counts, never the denormalized counters."""
        stats = DashboardStats(
            user_count=await self._users.count(),
            repository_count=await self._repos.count(),
            issue_count=await self._issues.count(),
        )
        logger.debug("Dashboard stats computed", **stats.model_dump())
        return stats

    async def list_users(self, pagination: PaginationParams) -> tuple[list[AdminUserRow], int]:
        rows, total = await self._users.list_with_repository_counts(pagination)
        users = [
            AdminUserRow(
                id=user.id,
                username=user.username,
                email=user.email,
                full_name=user.full_name,
                status=user.status.value.lower(),
                created_at=as_utc(user.created_at).date().isoformat(),
                last_active=relative_time(user.last_active_at),
                repository_count=repository_count,
            )
            for user, repository_count in rows
        ]
        return users, total
