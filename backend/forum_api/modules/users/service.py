"""
User Service - user records and forum following.
"""

from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from forum_api.core.exceptions import (
    AlreadyFollowing,
    DuplicateDocument,
    NotYetFollowing,
    UsernameTaken,
)
from forum_api.core.store import EntityStore
from forum_api.models.user import User
from forum_api.modules.forum.access import require_forum, require_user


class UserService:
    """
    Service for user records and the forums they follow.

    Usage:
        users = UserService(db_session)
        followed = await users.follow_forum(forum_id, user_id)
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize user service with database session."""
        self.store = EntityStore(db)

    async def get_user(self, user_id: str) -> User:
        """Get user by ID."""
        return await require_user(self.store, user_id)

    async def create_user(self, username: str) -> User:
        """
        Create new user record.

        Raises:
            UsernameTaken: If the username exists
        """
        if await self.store.find_by(User, "username", username):
            raise UsernameTaken()

        user = User(username=username, forums=[])
        try:
            await self.store.insert(user)
        except DuplicateDocument as e:
            raise UsernameTaken() from e

        logger.info(f"User {username} registered")
        return user

    # ==================== Following ====================

    async def follow_forum(self, forum_id: str, user_id: str) -> list[dict[str, Any]]:
        """
        Follow a forum.

        Returns:
            Updated followed-forum list

        Raises:
            ForumNotFound: If the forum does not exist
            AlreadyFollowing: If the user already follows it
        """
        forum = await require_forum(self.store, forum_id)
        user = await require_user(self.store, user_id)

        if any(ref.get("forum") == forum.id for ref in user.forums or []):
            raise AlreadyFollowing()

        user.forums = [*(user.forums or []), {"forum": forum.id}]
        await self.store.replace(user)
        return user.forums

    async def unfollow_forum(self, forum_id: str, user_id: str) -> list[dict[str, Any]]:
        """
        Stop following a forum.

        The forum itself need not exist any more.

        Raises:
            NotYetFollowing: If the user does not follow it
        """
        user = await require_user(self.store, user_id)

        remaining = [ref for ref in user.forums or [] if ref.get("forum") != forum_id]
        if len(remaining) == len(user.forums or []):
            raise NotYetFollowing()

        user.forums = remaining
        await self.store.replace(user)
        return user.forums
