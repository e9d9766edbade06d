"""Community and admin console payloads."""

import uuid

from devit.schemas.base import CamelModel


class ExploreUser(CamelModel):
    id: uuid.UUID
    name: str | None
    username: str
    bio: str
    followers: int
    following: int
    repositories: int


class ExploreUsersEnvelope(CamelModel):
    success: bool = True
    users: list[ExploreUser]


class AdminUserRow(CamelModel):
    id: uuid.UUID
    username: str
    email: str
    full_name: str | None
    status: str
    created_at: str
    last_active: str
    repository_count: int


class AdminUsersEnvelope(CamelModel):
    success: bool = True
    users: list[AdminUserRow]
    total: int


class DashboardStats(CamelModel):
    user_count: int
    repository_count: int
    issue_count: int
