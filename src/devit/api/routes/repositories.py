"""Repository endpoints: the caller's listing, explore, detail, stars."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from devit.api.deps import (
    get_current_identity,
    get_optional_identity,
    get_repository,
    user_id_of,
)
from devit.core.cache import get_cache
from devit.core.database import get_db
from devit.core.errors import UnauthenticatedError
from devit.core.security import Identity
from devit.models.repository import Repository
from devit.schemas.base import MessageResponse
from devit.schemas.repository import (
    ExploreRepositoriesEnvelope,
    RepositoryCreate,
    RepositoryDetailEnvelope,
    RepositoryEnvelope,
    RepositoryListEnvelope,
    RepositoryResponse,
)
from devit.services.directory import RepositoryDirectory
from devit.services.engagement import EngagementService

router = APIRouter(prefix="/repositories", tags=["repositories"])


@router.get("", response_model=RepositoryListEnvelope)
async def list_my_repositories(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> RepositoryListEnvelope:
    repositories = await RepositoryDirectory(db).list_by_owner(user_id_of(identity))
    return RepositoryListEnvelope(repositories=repositories)


@router.post("", response_model=RepositoryEnvelope)
async def create_repository(
    data: RepositoryCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    cache_client: Optional[Redis] = Depends(get_cache),
) -> RepositoryEnvelope:
    repository = await RepositoryDirectory(db, cache_client).create(
        owner_id=user_id_of(identity),
        name=data.name,
        description=data.description,
        is_private=data.is_private,
    )
    return RepositoryEnvelope(repository=RepositoryResponse.model_validate(repository))


# Declared before /{name} so "explore" is never taken for a repository name
@router.get("/explore", response_model=ExploreRepositoriesEnvelope)
async def explore_repositories(
    db: AsyncSession = Depends(get_db),
    cache_client: Optional[Redis] = Depends(get_cache),
) -> ExploreRepositoriesEnvelope:
    listing = await RepositoryDirectory(db, cache_client).list_public()
    return ExploreRepositoriesEnvelope.model_validate({"repositories": listing})


@router.get("/{name}", response_model=RepositoryDetailEnvelope)
async def get_repository_detail(
    name: str,
    owner: Optional[str] = Query(default=None, description="Owner username; defaults to the caller"),
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: AsyncSession = Depends(get_db),
) -> RepositoryDetailEnvelope:
    """Anonymous callers may read public repositories by naming the owner."""
    if owner is None and identity is None:
        raise UnauthenticatedError()
    viewer_id = user_id_of(identity) if identity else None
    repository, is_starred = await RepositoryDirectory(db).detail(
        owner or identity.username,  # type: ignore[union-attr]
        name,
        viewer_id,
    )
    return RepositoryDetailEnvelope(
        repository=RepositoryResponse.model_validate(repository),
        is_starred=is_starred,
    )


@router.delete("/{name}", response_model=MessageResponse)
async def delete_repository(
    name: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    cache_client: Optional[Redis] = Depends(get_cache),
) -> MessageResponse:
    await RepositoryDirectory(db, cache_client).delete(user_id_of(identity), name)
    return MessageResponse(message="Repository deleted successfully")


@router.post("/{name}/star", response_model=MessageResponse)
async def star_repository(
    repository: Repository = Depends(get_repository),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    cache_client: Optional[Redis] = Depends(get_cache),
) -> MessageResponse:
    await EngagementService(db, cache_client).star(user_id_of(identity), repository)
    return MessageResponse(message="Repository starred successfully")


@router.delete("/{name}/star", response_model=MessageResponse)
async def unstar_repository(
    repository: Repository = Depends(get_repository),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    cache_client: Optional[Redis] = Depends(get_cache),
) -> MessageResponse:
    await EngagementService(db, cache_client).unstar(user_id_of(identity), repository)
    return MessageResponse(message="Repository unstarred successfully")
