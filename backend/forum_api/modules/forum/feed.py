"""
Feed Service - following feed built on read.

For each forum the user follows, the forum and then its most recent
posts are fetched concurrently, each branch in its own session. A
branch that fails or finds nothing is skipped without affecting the
others.
"""

import asyncio
from typing import Any, Callable

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from forum_api.core import database
from forum_api.core.config import settings
from forum_api.core.store import EntityStore
from forum_api.models.forum import Forum, Post
from forum_api.modules.forum.access import require_user


class FeedService:
    """
    Following feed aggregation.

    Usage:
        feed = FeedService()
        posts = await feed.following_feed(user_id)
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] | None = None,
        posts_per_forum: int | None = None,
        sort_globally: bool | None = None,
    ) -> None:
        """
        Initialize feed service.

        Args:
            session_factory: Creates one session per concurrent branch
            posts_per_forum: Recent posts taken from each forum
            sort_globally: Re-sort the whole feed by date instead of
                keeping posts grouped by forum
        """
        self.session_factory = session_factory or database.async_session_maker
        self.posts_per_forum = posts_per_forum or settings.feed_posts_per_forum
        self.sort_globally = (
            settings.feed_sort_globally if sort_globally is None else sort_globally
        )

    async def following_feed(self, user_id: str) -> list[Post]:
        """
        Get recent posts from every forum the user follows.

        Posts are grouped per forum in follow order unless
        ``sort_globally`` is set.

        Raises:
            UserNotFound: If the user does not exist
        """
        async with self.session_factory() as db:
            user = await require_user(EntityStore(db), user_id)

        forum_ids = [ref.get("forum") for ref in user.forums or []]
        if not forum_ids:
            return []

        results = await asyncio.gather(
            *(self._resolve_forum(forum_id) for forum_id in forum_ids),
            return_exceptions=True,
        )
        forums: list[Forum] = []
        for forum_id, result in zip(forum_ids, results):
            if isinstance(result, BaseException):
                logger.warning(f"Skipping followed forum {forum_id}: {result!r}")
            elif result is None:
                logger.warning(f"Followed forum {forum_id} no longer exists")
            else:
                forums.append(result)

        batches = await asyncio.gather(
            *(self._recent_posts(forum) for forum in forums),
            return_exceptions=True,
        )
        feed: list[Post] = []
        for forum, batch in zip(forums, batches):
            if isinstance(batch, BaseException):
                logger.warning(f"Skipping posts of forum {forum.name}: {batch!r}")
                continue
            feed.extend(batch)

        if self.sort_globally:
            feed.sort(key=lambda post: post.date, reverse=True)
        return feed

    async def _resolve_forum(self, forum_id: Any) -> Forum | None:
        async with self.session_factory() as db:
            return await EntityStore(db).get_by_id(Forum, forum_id)

    async def _recent_posts(self, forum: Forum) -> list[Post]:
        async with self.session_factory() as db:
            return await EntityStore(db).find_by(
                Post, "forum", forum.id, limit=self.posts_per_forum
            )
