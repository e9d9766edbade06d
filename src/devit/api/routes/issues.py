"""Issues of a repository."""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from devit.api.deps import get_current_identity, get_repository, user_id_of
from devit.core.database import get_db
from devit.core.security import Identity
from devit.models.issue import IssueStateEnum
from devit.models.repository import Repository
from devit.schemas.issue import (
    IssueCreate,
    IssueEnvelope,
    IssueListEnvelope,
    IssueResponse,
    IssueUpdate,
)
from devit.services.engagement import EngagementService

router = APIRouter(prefix="/repositories/{name}/issues", tags=["issues"])


@router.get("", response_model=IssueListEnvelope)
async def list_issues(
    repository: Repository = Depends(get_repository),
    db: AsyncSession = Depends(get_db),
) -> IssueListEnvelope:
    issues = await EngagementService(db).list_issues(repository)
    return IssueListEnvelope(issues=[IssueResponse.from_issue(issue) for issue in issues])


@router.post("", response_model=IssueEnvelope)
async def create_issue(
    data: IssueCreate,
    repository: Repository = Depends(get_repository),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> IssueEnvelope:
    issue = await EngagementService(db).create_issue(
        repository,
        author_id=user_id_of(identity),
        title=data.title,
        body=data.body,
    )
    return IssueEnvelope(issue=IssueResponse.from_issue(issue))


@router.get("/{number}", response_model=IssueEnvelope)
async def get_issue(
    number: int = Path(..., ge=1),
    repository: Repository = Depends(get_repository),
    db: AsyncSession = Depends(get_db),
) -> IssueEnvelope:
    issue = await EngagementService(db).get_issue(repository, number)
    return IssueEnvelope(issue=IssueResponse.from_issue(issue))


@router.patch("/{number}", response_model=IssueEnvelope)
async def update_issue(
    data: IssueUpdate,
    number: int = Path(..., ge=1),
    repository: Repository = Depends(get_repository),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> IssueEnvelope:
    issue = await EngagementService(db).update_issue(
        repository,
        number,
        actor_id=user_id_of(identity),
        title=data.title,
        body=data.body,
        state=IssueStateEnum(data.state.upper()) if data.state else None,
    )
    return IssueEnvelope(issue=IssueResponse.from_issue(issue))
