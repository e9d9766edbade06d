"""Repository payloads."""

import uuid
from datetime import datetime

from pydantic import Field

from devit.schemas.base import CamelModel

REPOSITORY_NAME_PATTERN = r"^[A-Za-z0-9._-]+$"


class RepositoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100, pattern=REPOSITORY_NAME_PATTERN)
    description: str = Field(default="", max_length=2000)
    is_private: bool = False


class OwnerRef(CamelModel):
    id: uuid.UUID
    username: str
    full_name: str | None = None


class RepositoryResponse(CamelModel):
    """A repository as stored, counters included."""

    id: uuid.UUID
    name: str
    description: str
    language: str
    is_private: bool
    star_count: int
    fork_count: int
    open_issues_count: int
    owner_id: uuid.UUID
    owner: OwnerRef
    created_at: datetime
    updated_at: datetime


class RepositorySummary(CamelModel):
    """Row of the caller's own listing, with live counts."""

    id: uuid.UUID
    name: str
    description: str
    language: str
    stars: int
    forks: int
    issues: int
    is_private: bool
    updated_at: str
    user_id: uuid.UUID


class ExploreOwner(CamelModel):
    name: str
    username: str


class ExploreRepository(CamelModel):
    id: uuid.UUID
    name: str
    description: str
    is_private: bool
    language: str
    stars: int
    forks: int
    updated_at: datetime
    owner: ExploreOwner


class RepositoryEnvelope(CamelModel):
    success: bool = True
    repository: RepositoryResponse


class RepositoryDetailEnvelope(RepositoryEnvelope):
    is_starred: bool


class RepositoryListEnvelope(CamelModel):
    success: bool = True
    repositories: list[RepositorySummary]


class ExploreRepositoriesEnvelope(CamelModel):
    success: bool = True
    repositories: list[ExploreRepository]
