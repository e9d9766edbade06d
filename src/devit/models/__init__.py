"""Database models."""

from devit.models.base import Base, TimestampMixin, UUIDMixin
from devit.models.follow import Follow
from devit.models.issue import Issue, IssueStateEnum
from devit.models.repository import Repository
from devit.models.star import Star
from devit.models.user import User, UserStatusEnum

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "Follow",
    "Issue",
    "IssueStateEnum",
    "Repository",
    "Star",
    "User",
    "UserStatusEnum",
]
