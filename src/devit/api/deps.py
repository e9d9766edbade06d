"""Request dependencies: bearer identities and repository resolution."""

import uuid
from typing import Optional

from fastapi import Depends, Header, Query
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from devit.core.cache import get_cache
from devit.core.config import settings
from devit.core.database import get_db
from devit.core.errors import ErrorMessage, UnauthenticatedError, UnauthorizedError
from devit.core.security import Identity, extract_bearer_token, verify_token
from devit.models.repository import Repository
from devit.services.directory import RepositoryDirectory


def _user_identity(authorization: Optional[str]) -> Optional[Identity]:
    identity = verify_token(extract_bearer_token(authorization), settings.jwt_secret)
    if identity is None:
        return None
    try:
        uuid.UUID(identity.id)
    except ValueError:
        return None
    return identity


async def get_current_identity(
    authorization: Optional[str] = Header(default=None),
) -> Identity:
    """The signed-in user. Admin tokens are signed with another secret and fail here."""
    identity = _user_identity(authorization)
    if identity is None:
        raise UnauthenticatedError()
    return identity


async def get_optional_identity(
    authorization: Optional[str] = Header(default=None),
) -> Optional[Identity]:
    return _user_identity(authorization)


async def get_current_admin(
    authorization: Optional[str] = Header(default=None),
) -> Identity:
    identity = verify_token(extract_bearer_token(authorization), settings.admin_jwt_secret)
    if identity is None:
        raise UnauthenticatedError()
    if not identity.is_admin:
        raise UnauthorizedError(ErrorMessage.ADMIN_REQUIRED)
    return identity


def user_id_of(identity: Identity) -> uuid.UUID:
    return uuid.UUID(identity.id)


async def get_repository(
    name: str,
    owner: Optional[str] = Query(default=None, description="Owner username; defaults to the caller"),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    cache_client: Optional[Redis] = Depends(get_cache),
) -> Repository:
    """Resolve ``{name}`` in the path to a repository the caller can see."""
    directory = RepositoryDirectory(db, cache_client)
    return await directory.find_by_owner_and_name(
        owner or identity.username,
        name,
        user_id_of(identity),
    )
