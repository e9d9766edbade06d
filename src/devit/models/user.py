"""User account model."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum as SQLEnum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devit.models.base import Base, TimestampMixin, UUIDMixin, generate_repr

if TYPE_CHECKING:
    from devit.models.repository import Repository


class UserStatusEnum(str, Enum):
    """Account status shown in the admin console."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class User(Base, UUIDMixin, TimestampMixin):
    """A DevIT account.

    Attributes:
        id: Primary key UUID
        username: Globally unique handle
        email: Globally unique email address
        password_hash: bcrypt hash of the password
        full_name: Display name
        bio: Optional profile text
        status: Account status
        last_active_at: Last successful sign-in
        repositories: Repositories owned by this user
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(39), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[UserStatusEnum] = mapped_column(
        SQLEnum(UserStatusEnum, native_enum=True),
        nullable=False,
        default=UserStatusEnum.ACTIVE,
    )
    last_active_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    repositories: Mapped[list["Repository"]] = relationship(
        "Repository",
        back_populates="owner",
        lazy="raise",
        passive_deletes=True,
    )

    __table_args__ = (Index("idx_users_created_at", "created_at"),)

    __repr__ = generate_repr("id", "username")
