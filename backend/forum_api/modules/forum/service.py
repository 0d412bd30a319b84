"""
Forum Service - forum directory management.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from forum_api.core.exceptions import DuplicateDocument, ForumNameTaken, ForumNotFound
from forum_api.core.store import EntityStore
from forum_api.models.forum import Forum, Post


class ForumService:
    """
    Service for creating and browsing forums.

    Usage:
        forum = ForumService(db_session)
        chess, posts = await forum.get_forum("Chess")
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize forum service with database session."""
        self.store = EntityStore(db)

    async def get_forums(self) -> list[Forum]:
        """Get all forums ordered by name."""
        return await self.store.list_all(Forum, order_by="name", descending=False)

    async def get_user_forums(self, user_id: str) -> list[Forum]:
        """Get forums created by a user, newest first."""
        return await self.store.find_by(Forum, "user", user_id)

    async def get_forum(self, name: str) -> tuple[Forum, list[Post]]:
        """
        Get forum by name together with its posts.

        Posts are resolved from the forum's reference list in order;
        references to deleted posts are skipped.

        Raises:
            ForumNotFound: If no forum has this name
        """
        forums = await self.store.find_by(Forum, "name", name)
        if not forums:
            raise ForumNotFound()
        forum = forums[0]

        posts = []
        for ref in forum.posts or []:
            post = await self.store.get_by_id(Post, ref.get("post"))
            if post is None:
                logger.warning(f"Forum {forum.name} has dangling reference {ref}")
                continue
            posts.append(post)

        return forum, posts

    async def create_forum(
        self,
        name: str,
        user_id: str,
        description: str | None = None,
    ) -> Forum:
        """
        Create new forum.

        Raises:
            ForumNameTaken: If a forum with this name exists
        """
        if await self.store.find_by(Forum, "name", name):
            raise ForumNameTaken()

        forum = Forum(name=name, description=description, user=user_id, posts=[])
        try:
            await self.store.insert(forum)
        except DuplicateDocument as e:
            raise ForumNameTaken() from e

        logger.info(f"Forum {name} created by {user_id}")
        return forum
