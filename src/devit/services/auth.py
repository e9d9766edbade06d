"""Account sign-up, sign-in and administrator login."""

from sqlalchemy.ext.asyncio import AsyncSession

from devit.core.errors import (
    ErrorMessage,
    ResourceConflictError,
    UnauthenticatedError,
)
from devit.core.logging import get_logger
from devit.core.security import (
    ADMIN_IDENTITY_ID,
    check_admin_credentials,
    hash_password,
    issue_admin_token,
    issue_user_token,
    verify_password,
)
from devit.models.user import User
from devit.repositories.base import ConflictError
from devit.repositories.user import UserRepository

logger = get_logger(__name__)


class AuthService:
    def __init__(self, session: AsyncSession) -> None:
        self._users = UserRepository(session)

    async def sign_up(
        self, username: str, email: str, full_name: str, password: str
    ) -> tuple[User, str]:
        """Create an account and return it with a fresh session token.

        Raises:
            ResourceConflictError: If the email or username is already taken
        """
        if (
            await self._users.get_by_email(email) is not None
            or await self._users.get_by_username(username) is not None
        ):
            logger.info("Sign-up rejected, account exists", username=username)
            raise ResourceConflictError(ErrorMessage.USER_EXISTS)

        try:
            user = await self._users.create(
                username=username,
                email=email,
                full_name=full_name,
                password_hash=hash_password(password),
            )
            await self._users.commit()
        except ConflictError as e:
            # Lost a race with a concurrent sign-up for the same name
            raise ResourceConflictError(ErrorMessage.USER_EXISTS) from e

        logger.info("User signed up", user_id=str(user.id), username=user.username)
        return user, issue_user_token(str(user.id), user.username, user.email)

    async def sign_in(self, email: str, password: str) -> tuple[User, str]:
        """Check credentials and return the user with a fresh session token.

        Unknown email and wrong password are indistinguishable to the caller.

        Raises:
            UnauthenticatedError: On any credential mismatch
        """
        user = await self._users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Sign-in rejected", known_email=user is not None)
            raise UnauthenticatedError(ErrorMessage.INVALID_LOGIN)

        user = await self._users.touch_last_active(user.id) or user
        await self._users.commit()

        logger.info("User signed in", user_id=str(user.id))
        return user, issue_user_token(str(user.id), user.username, user.email)


def admin_login(username: str, password: str) -> tuple[str, str]:
    """Return (admin id, token) for the configured administrator pair.

    Raises:
        UnauthenticatedError: Unless both username and password match exactly
    """
    if not check_admin_credentials(username, password):
        logger.info("Admin login rejected", username=username)
        raise UnauthenticatedError(ErrorMessage.INVALID_ADMIN_LOGIN)
    logger.info("Admin logged in", username=username)
    return ADMIN_IDENTITY_ID, issue_admin_token(username)
