"""Issue payloads. State is lowercase on the wire."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from devit.models.issue import Issue
from devit.schemas.base import CamelModel
from devit.schemas.repository import OwnerRef


class IssueCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    body: str = Field(default="", max_length=65535)


class IssueUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    body: str | None = Field(default=None, max_length=65535)
    state: Literal["open", "closed"] | None = None

    @field_validator("state", mode="before")
    @classmethod
    def _lowercase_state(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value


class IssueResponse(CamelModel):
    id: uuid.UUID
    number: int
    title: str
    body: str
    state: str
    created_at: datetime
    updated_at: datetime
    closed_at: datetime | None = None
    author: OwnerRef

    @classmethod
    def from_issue(cls, issue: Issue) -> "IssueResponse":
        return cls(
            id=issue.id,
            number=issue.number,
            title=issue.title,
            body=issue.body,
            state=issue.state.value.lower(),
            created_at=issue.created_at,
            updated_at=issue.updated_at,
            closed_at=issue.closed_at,
            author=OwnerRef.model_validate(issue.author),
        )


class IssueEnvelope(CamelModel):
    success: bool = True
    issue: IssueResponse


class IssueListEnvelope(CamelModel):
    success: bool = True
    issues: list[IssueResponse]
