"""Database seed script with sample DevIT data.

Populates users, repositories, stars, follows and issues for local
development. All writes go through the service layer so counters and issue
numbers come out exactly as they would from the API.

Usage:
    # Local development (tables are created if missing)
    uv run python seed.py

    # Docker
    docker compose exec api uv run python seed.py

Features:
    - Idempotent: skipped when any user already exists
    - Counters consistent: stars and issues are created via the services
"""

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from devit.core.database import async_session_maker, engine
from devit.core.logging import configure_logging, get_logger
from devit.models import Base, IssueStateEnum, Repository, User
from devit.repositories.user import UserRepository
from devit.services.auth import AuthService
from devit.services.community import CommunityService
from devit.services.directory import RepositoryDirectory
from devit.services.engagement import EngagementService

configure_logging()
logger = get_logger(__name__)

# Sample data
USERS = [
    {
        "username": "demo",
        "email": "demo@devit.com",
        "full_name": "Demo User",
        "password": "password123",
    },
    {
        "username": "test",
        "email": "test@devit.com",
        "full_name": "Test User",
        "password": "password",
    },
    {
        "username": "jane",
        "email": "jane@devit.com",
        "full_name": "Jane Developer",
        "password": "secure123",
    },
    {
        "username": "alex",
        "email": "alex@devit.com",
        "full_name": "Alex Johnson",
        "password": "mypassword",
    },
]

REPOSITORIES = {
    "demo": [
        {
            "name": "my-awesome-project",
            "description": "A demo project showcasing modern web development",
            "is_private": False,
        },
        {
            "name": "devit-clone",
            "description": "Learning project - building a GitHub alternative",
            "is_private": True,
        },
    ],
    "test": [
        {
            "name": "simple-api",
            "description": "RESTful API example with authentication",
            "is_private": False,
        },
    ],
    "jane": [
        {
            "name": "react-components",
            "description": "Reusable React component library",
            "is_private": False,
        },
    ],
    "alex": [
        {
            "name": "infra-templates",
            "description": "Terraform and Kubernetes templates",
            "is_private": False,
        },
    ],
}

# (user, owner, repository)
STARS = [
    ("test", "demo", "my-awesome-project"),
    ("jane", "demo", "my-awesome-project"),
    ("alex", "demo", "my-awesome-project"),
    ("demo", "test", "simple-api"),
    ("jane", "test", "simple-api"),
    ("demo", "jane", "react-components"),
]

# (follower, following)
FOLLOWS = [
    ("test", "demo"),
    ("jane", "demo"),
    ("alex", "jane"),
    ("demo", "jane"),
]

# (author, owner, repository, title, body, closed)
ISSUES = [
    ("test", "demo", "my-awesome-project", "Add dark mode support",
     "Users have requested a dark theme option.", False),
    ("jane", "demo", "my-awesome-project", "Fix mobile responsive layout",
     "The navigation menu breaks on small screens.", False),
    ("demo", "demo", "my-awesome-project", "Update README",
     "Document the local setup steps.", True),
    ("alex", "test", "simple-api", "Add rate limiting",
     "Protect the login endpoint from brute force attempts.", False),
]


async def check_if_seeded(session: AsyncSession) -> bool:
    return await UserRepository(session).count() > 0


async def seed_users(session: AsyncSession) -> dict[str, User]:
    logger.info("Seeding users")
    auth = AuthService(session)
    users: dict[str, User] = {}
    for user_data in USERS:
        user, _ = await auth.sign_up(**user_data)
        users[user.username] = user
        logger.info("Created user", username=user.username)
    return users


async def seed_repositories(
    session: AsyncSession, users: dict[str, User]
) -> dict[tuple[str, str], Repository]:
    logger.info("Seeding repositories")
    directory = RepositoryDirectory(session)
    repos: dict[tuple[str, str], Repository] = {}
    for owner, repos_data in REPOSITORIES.items():
        for repo_data in repos_data:
            repo = await directory.create(owner_id=users[owner].id, **repo_data)
            repos[(owner, repo.name)] = repo
            logger.info("Created repository", owner=owner, name=repo.name)
    return repos


async def seed_engagement(
    session: AsyncSession,
    users: dict[str, User],
    repos: dict[tuple[str, str], Repository],
) -> None:
    logger.info("Seeding stars, follows and issues")
    engagement = EngagementService(session)
    community = CommunityService(session)

    for username, owner, name in STARS:
        await engagement.star(users[username].id, repos[(owner, name)])

    for follower, following in FOLLOWS:
        await community.follow(users[follower].id, following)

    for author, owner, name, title, body, closed in ISSUES:
        repo = repos[(owner, name)]
        issue = await engagement.create_issue(repo, users[author].id, title, body)
        if closed:
            await engagement.update_issue(
                repo, issue.number, users[owner].id, state=IssueStateEnum.CLOSED
            )


async def seed_database() -> None:
    """Main seeding function."""
    logger.info("Starting database seeding")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_maker() as session:
        try:
            # Check if already seeded
            if await check_if_seeded(session):
                logger.info("Database already contains data. Skipping seed (idempotent).")
                return

            users = await seed_users(session)
            repos = await seed_repositories(session, users)
            await seed_engagement(session, users, repos)

            logger.info(
                "Database seeding completed successfully!",
                users=len(users),
                repositories=len(repos),
                stars=len(STARS),
                follows=len(FOLLOWS),
                issues=len(ISSUES),
            )

        except Exception as e:
            logger.error(f"Error seeding database: {e}")
            await session.rollback()
            raise


if __name__ == "__main__":
    asyncio.run(seed_database())
