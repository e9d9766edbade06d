"""Model factory functions for testing.

Provides simple factory functions to create model instances with reasonable defaults.
Each factory accepts optional kwargs to override defaults and an optional db_session
to persist the instance to the database.

Example:
    # Create unsaved instance
    user = await create_user(username="octocat")

    # Create and save to database
    repo = await create_repository(
        db_session=session,
        owner=user,
        name="hello-world",
    )
"""

import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from devit.models.issue import Issue, IssueStateEnum
from devit.models.repository import Repository
from devit.models.user import User

# Precomputed bcrypt hash; factories never need a verifiable password
DUMMY_PASSWORD_HASH = "$2b$04$abcdefghijklmnopqrstuuQ1H1x0Tz0o1qR9vVvQd6Yk1oE7mZkS6"


async def create_user(
    db_session: AsyncSession | None = None,
    **kwargs: Any,
) -> User:
    """Create a User instance for testing.

    Example:
        user = await create_user(username="octocat", full_name="The Octocat")
    """
    username = kwargs.pop("username", f"user-{uuid.uuid4().hex[:8]}")
    defaults = {
        "username": username,
        "email": f"{username}@example.com",
        "full_name": username.title(),
        "password_hash": DUMMY_PASSWORD_HASH,
    }
    user = User(**{**defaults, **kwargs})

    if db_session:
        db_session.add(user)
        await db_session.flush()

    return user


async def create_repository(
    db_session: AsyncSession | None = None,
    owner: User | None = None,
    **kwargs: Any,
) -> Repository:
    """Create a Repository instance for testing.

    A fresh owner is created when none is given and a session is available.
    """
    if owner is None:
        owner = await create_user(db_session)

    defaults = {
        "name": f"repo-{uuid.uuid4().hex[:8]}",
        "description": "A test repository",
        "is_private": False,
        "language": "Unknown",
        "star_count": 0,
        "fork_count": 0,
        "open_issues_count": 0,
        "issue_sequence": 0,
    }
    repository = Repository(**{**defaults, **kwargs}, owner_id=owner.id)

    if db_session:
        db_session.add(repository)
        await db_session.flush()
        await db_session.refresh(repository)

    return repository


async def create_issue(
    db_session: AsyncSession | None = None,
    repository: Repository | None = None,
    author: User | None = None,
    **kwargs: Any,
) -> Issue:
    """Create an Issue row directly, bypassing the numbering sequence."""
    if repository is None:
        repository = await create_repository(db_session)
    if author is None:
        author = await create_user(db_session)

    defaults = {
        "number": 1,
        "title": "Something is broken",
        "body": "",
        "state": IssueStateEnum.OPEN,
    }
    issue = Issue(
        **{**defaults, **kwargs},
        repository_id=repository.id,
        author_id=author.id,
    )

    if db_session:
        db_session.add(issue)
        await db_session.flush()
        await db_session.refresh(issue)

    return issue
