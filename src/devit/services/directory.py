"""Repository Directory: create, look up, list and delete repositories.

The public explore listing is served from the cache when possible. Every
write that changes what the listing shows (create, delete, star, unstar)
drops the cached copy after its transaction commits.
"""

import uuid
from typing import Any, Optional

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from devit.core import cache
from devit.core.config import settings
from devit.core.errors import (
    ErrorMessage,
    ResourceConflictError,
    ResourceNotFoundError,
)
from devit.core.logging import get_logger
from devit.models.repository import Repository
from devit.repositories.base import ConflictError
from devit.repositories.repository import RepoRepository
from devit.repositories.star import StarRepository
from devit.repositories.user import UserRepository
from devit.schemas.repository import (
    ExploreOwner,
    ExploreRepository,
    RepositorySummary,
)
from devit.services.timefmt import relative_time

logger = get_logger(__name__)

EXPLORE_CACHE_KEY = "devit:repositories:explore"


async def invalidate_explore(client: Optional[Redis]) -> None:
    await cache.invalidate(client, EXPLORE_CACHE_KEY)


def visible_to(repository: Repository, viewer_id: Optional[uuid.UUID]) -> bool:
    return not repository.is_private or repository.owner_id == viewer_id


class RepositoryDirectory:
    def __init__(self, session: AsyncSession, cache_client: Optional[Redis] = None) -> None:
        self._repos = RepoRepository(session)
        self._users = UserRepository(session)
        self._stars = StarRepository(session)
        self._cache = cache_client

    async def create(
        self,
        owner_id: uuid.UUID,
        name: str,
        description: str = "",
        is_private: bool = False,
    ) -> Repository:
        """Create a repository in the owner's namespace.

        Raises:
            ResourceNotFoundError: If the owner account no longer exists
            ResourceConflictError: If the owner already has a repository
                with this name
        """
        if await self._users.get(owner_id) is None:
            raise ResourceNotFoundError(ErrorMessage.USER_NOT_FOUND)
        if await self._repos.get_by_owner_and_name(owner_id, name) is not None:
            raise ResourceConflictError(ErrorMessage.REPOSITORY_EXISTS)

        try:
            repository = await self._repos.create(
                name=name,
                description=description or "",
                is_private=is_private,
                owner_id=owner_id,
                language="Unknown",
            )
            await self._repos.commit()
        except ConflictError as e:
            raise ResourceConflictError(ErrorMessage.REPOSITORY_EXISTS) from e

        logger.info(
            "Repository created",
            repository_id=str(repository.id),
            owner_id=str(owner_id),
            name=name,
            is_private=is_private,
        )
        await invalidate_explore(self._cache)
        return repository

    async def list_by_owner(self, owner_id: uuid.UUID) -> list[RepositorySummary]:
        rows = await self._repos.list_by_owner_with_counts(owner_id)
        return [
            RepositorySummary(
                id=repo.id,
                name=repo.name,
                description=repo.description,
                language=repo.language,
                stars=stars,
                forks=repo.fork_count,
                issues=issues,
                is_private=repo.is_private,
                updated_at=relative_time(repo.updated_at),
                user_id=repo.owner_id,
            )
            for repo, stars, issues in rows
        ]

    async def find_by_owner_and_name(
        self,
        owner_username: str,
        name: str,
        viewer_id: Optional[uuid.UUID] = None,
    ) -> Repository:
        """Resolve ``owner/name``; private repositories of others do not exist.

        Raises:
            ResourceNotFoundError: If absent or not visible to the viewer
        """
        repository = await self._repos.get_by_owner_username_and_name(owner_username, name)
        if repository is None or not visible_to(repository, viewer_id):
            raise ResourceNotFoundError(ErrorMessage.REPOSITORY_NOT_FOUND)
        return repository

    async def detail(
        self,
        owner_username: str,
        name: str,
        viewer_id: Optional[uuid.UUID] = None,
    ) -> tuple[Repository, bool]:
        """The repository plus whether the viewer has starred it."""
        repository = await self.find_by_owner_and_name(owner_username, name, viewer_id)
        is_starred = False
        if viewer_id is not None:
            is_starred = await self._stars.exists(viewer_id, repository.id)
        return repository, is_starred

    async def list_public(self) -> list[dict[str, Any]]:
        """Public repositories for the explore page, as wire-ready dicts."""
        cached = await cache.get_json(self._cache, EXPLORE_CACHE_KEY)
        if isinstance(cached, list):
            logger.debug("Explore listing served from cache", count=len(cached))
            return cached

        repositories = await self._repos.list_public()
        listing = [
            ExploreRepository(
                id=repo.id,
                name=repo.name,
                description=repo.description,
                is_private=repo.is_private,
                language=repo.language,
                stars=repo.star_count,
                forks=repo.fork_count,
                updated_at=repo.updated_at,
                owner=ExploreOwner(
                    name=repo.owner.full_name or repo.owner.username,
                    username=repo.owner.username,
                ),
            ).model_dump(mode="json", by_alias=True)
            for repo in repositories
        ]
        await cache.set_json(
            self._cache,
            EXPLORE_CACHE_KEY,
            listing,
            settings.explore_cache_ttl_seconds,
        )
        return listing

    async def delete(self, owner_id: uuid.UUID, name: str) -> None:
        """Delete one of the owner's repositories with its issues and stars.

        Raises:
            ResourceNotFoundError: If the owner has no repository by that name
        """
        repository = await self._repos.get_by_owner_and_name(owner_id, name)
        if repository is None:
            raise ResourceNotFoundError(ErrorMessage.REPOSITORY_NOT_FOUND)

        await self._repos.delete_with_dependents(repository)
        await self._repos.commit()
        logger.info("Repository deleted", owner_id=str(owner_id), name=name)
        await invalidate_explore(self._cache)
