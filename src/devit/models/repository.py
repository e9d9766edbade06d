"""Repository model for user-owned code repositories."""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devit.models.base import Base, TimestampMixin, UUIDMixin, generate_repr

if TYPE_CHECKING:
    from devit.models.user import User


class Repository(Base, UUIDMixin, TimestampMixin):
    """A repository in its owner's namespace.

    The counters are denormalized: star_count tracks the Star rows and
    open_issues_count the OPEN issues, both updated in the same transaction
    as the rows they summarise. issue_sequence is the last issue number handed
    out and only ever grows.

    Attributes:
        id: Primary key UUID
        name: Repository name, unique per owner
        description: Free-form description
        is_private: Hidden from explore and from other users
        language: Primary language label
        star_count: Number of Star rows referencing this repository
        fork_count: Number of forks
        open_issues_count: Number of issues in the OPEN state
        issue_sequence: Highest issue number assigned so far
        owner_id: Foreign key to users table
        owner: Owning user (always loaded with the repository)
    """

    __tablename__ = "repositories"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    language: Mapped[str] = mapped_column(String(50), nullable=False, default="Unknown")
    star_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    fork_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    open_issues_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    issue_sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Relationships
    owner: Mapped["User"] = relationship(
        "User",
        back_populates="repositories",
        lazy="joined",
    )

    __table_args__ = (
        UniqueConstraint("owner_id", "name", name="uq_repositories_owner_name"),
        Index("idx_repositories_owner_id", "owner_id"),
        Index("idx_repositories_star_count", "star_count"),
    )

    __repr__ = generate_repr("id", "name", "owner_id")
