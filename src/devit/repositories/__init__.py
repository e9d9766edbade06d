"""Repository layer for database operations.

Repositories encapsulate database operations and provide a clean API for
the service layer. Each entity repository composes a BaseRepository for
the generic CRUD work.
"""

from devit.repositories.base import (
    BaseRepository,
    ConflictError,
    PaginationParams,
    RepositoryError,
)
from devit.repositories.follow import FollowRepository
from devit.repositories.issue import IssueRepository
from devit.repositories.repository import RepoRepository
from devit.repositories.star import StarRepository
from devit.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "ConflictError",
    "FollowRepository",
    "IssueRepository",
    "PaginationParams",
    "RepoRepository",
    "RepositoryError",
    "StarRepository",
    "UserRepository",
]
