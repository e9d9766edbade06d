"""Issue model for repository issue tracking."""

import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devit.models.base import Base, TimestampMixin, UUIDMixin, generate_repr

if TYPE_CHECKING:
    from devit.models.user import User


class IssueStateEnum(str, Enum):
    """Issue lifecycle state. Transitions go both ways."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"


class Issue(Base, UUIDMixin, TimestampMixin):
    """An issue filed against a repository.

    Attributes:
        id: Primary key UUID
        number: Sequential per repository, starting at 1, never reused
        title: Issue title
        body: Issue body (may be empty)
        state: OPEN or CLOSED
        closed_at: Set while the issue is CLOSED
        author_id: Foreign key to users table
        repository_id: Foreign key to repositories table
        author: Authoring user (always loaded with the issue)
    """

    __tablename__ = "issues"

    number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    state: Mapped[IssueStateEnum] = mapped_column(
        SQLEnum(IssueStateEnum, native_enum=True),
        nullable=False,
        default=IssueStateEnum.OPEN,
    )
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    author_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    repository_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("repositories.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Relationships
    author: Mapped["User"] = relationship("User", lazy="joined")

    __table_args__ = (
        UniqueConstraint("repository_id", "number", name="uq_issues_repository_number"),
        Index("idx_issues_repository_id", "repository_id"),
    )

    __repr__ = generate_repr("id", "repository_id", "number", "state")
