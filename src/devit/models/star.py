"""Star join table between users and repositories."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, func
from sqlalchemy.orm import Mapped, mapped_column

from devit.models.base import Base, generate_repr


class Star(Base):
    """A user's star on a repository; at most one per pair.

    Attributes:
        user_id: Starring user (part of the composite key)
        repository_id: Starred repository (part of the composite key)
        created_at: When the star was given
    """

    __tablename__ = "stars"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    repository_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("repositories.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (Index("idx_stars_repository_id", "repository_id"),)

    __repr__ = generate_repr("user_id", "repository_id")
