"""User discovery and follows."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devit.api.deps import get_current_identity, user_id_of
from devit.core.database import get_db
from devit.core.security import Identity
from devit.schemas.base import MessageResponse
from devit.schemas.user import ExploreUsersEnvelope
from devit.services.community import CommunityService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/explore", response_model=ExploreUsersEnvelope)
async def explore_users(db: AsyncSession = Depends(get_db)) -> ExploreUsersEnvelope:
    return ExploreUsersEnvelope(users=await CommunityService(db).explore_users())


@router.post("/{username}/follow", response_model=MessageResponse)
async def follow_user(
    username: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await CommunityService(db).follow(user_id_of(identity), username)
    return MessageResponse(message=f"Now following {username}")


@router.delete("/{username}/follow", response_model=MessageResponse)
async def unfollow_user(
    username: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await CommunityService(db).unfollow(user_id_of(identity), username)
    return MessageResponse(message=f"Unfollowed {username}")
