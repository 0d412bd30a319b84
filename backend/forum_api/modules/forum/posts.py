"""
Post Service - post lifecycle and the forum/post relationship.

A forum keeps a newest-first list of ``{"post": id}`` references and
each post records its forum. Both sides are written separately with no
transaction spanning them:

- create: insert post, then prepend the reference to the forum
- delete: delete post, then drop the reference from the forum

A failure between the two writes leaves an orphan post or a dangling
reference. Readers of ``Forum.posts`` skip references that no longer
resolve. A revision conflict on the forum write is not a failure: the
forum is re-read and the change applied again.
"""

from datetime import datetime
from typing import Callable

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from forum_api.core.config import settings
from forum_api.core.exceptions import ConcurrentUpdate, ForumNotFound, Unauthorized
from forum_api.core.store import EntityStore
from forum_api.models.forum import Forum, Post
from forum_api.modules.forum.access import require_forum, require_post, require_user


class PostService:
    """
    Service for creating, reading and deleting posts.

    Usage:
        posts = PostService(db_session)
        post = await posts.create_post(forum_id, user_id, title="Hi", text="...")
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize post service with database session."""
        self.store = EntityStore(db)

    # ==================== Reads ====================

    async def list_posts(self) -> list[Post]:
        """Get all posts, newest first."""
        return await self.store.list_all(Post)

    async def list_recent_posts(self, limit: int | None = None) -> list[Post]:
        """Get the most recent posts."""
        return await self.store.list_all(Post, limit=limit or settings.recent_posts_limit)

    async def list_forum_posts(self, forum_name: str) -> list[Post]:
        """
        Get all posts of a forum, newest first.

        Raises:
            ForumNotFound: If no forum has this name
        """
        forums = await self.store.find_by(Forum, "name", forum_name)
        if not forums:
            raise ForumNotFound()
        return await self.store.find_by(Post, "forum", forums[0].id)

    async def get_post(self, post_id: str) -> Post:
        """Get post by ID."""
        return await require_post(self.store, post_id)

    # ==================== Writes ====================

    async def create_post(
        self,
        forum_id: str,
        user_id: str,
        title: str,
        text: str,
    ) -> Post:
        """
        Create a post and link it from its forum.

        Args:
            forum_id: Target forum ID
            user_id: Author user ID
            title: Post title
            text: Post body

        Returns:
            Created post
        """
        forum = await require_forum(self.store, forum_id)
        author = await require_user(self.store, user_id)
        forum_name, username = forum.name, author.username

        post = Post(
            title=title,
            text=text,
            forum=forum.id,
            forum_name=forum_name,
            user=author.id,
            username=username,
            likes=[],
            comments=[],
            date=datetime.utcnow(),
        )
        await self.store.insert(post)
        post_id = post.id

        def link(refs: list[dict]) -> list[dict]:
            if {"post": post_id} in refs:
                return refs
            return [{"post": post_id}, *refs]

        if await self._update_refs(forum, link):
            # A rollback during the retry expired the new post
            post = await self.store.reload(Post, post_id)

        logger.info(f"Post {post_id} created in forum {forum_name} by {username}")
        return post

    async def delete_post(self, post_id: str, user_id: str) -> None:
        """
        Delete a post owned by the caller and unlink it from its forum.

        Raises:
            PostNotFound: If the post does not exist
            Unauthorized: If the caller is not the author
        """
        post = await require_post(self.store, post_id)
        if post.user != user_id:
            raise Unauthorized()

        forum_id = post.forum
        await self.store.delete(post)

        forum = await self.store.get_by_id(Forum, forum_id)
        if forum is None:
            logger.warning(f"Forum {forum_id} of deleted post {post_id} is gone")
            return

        def unlink(refs: list[dict]) -> list[dict]:
            return [ref for ref in refs if ref.get("post") != post_id]

        await self._update_refs(forum, unlink)
        logger.info(f"Post {post_id} deleted from forum {forum_id}")

    async def _update_refs(
        self,
        forum: Forum,
        update: Callable[[list[dict]], list[dict]],
    ) -> bool:
        """
        Rewrite a forum's reference list.

        The first write of both protocols is already committed, so a
        revision conflict here re-reads the forum and applies ``update``
        again instead of failing the call.

        Returns:
            True if at least one attempt lost a race
        """
        forum_id = forum.id
        attempts = max(1, settings.forum_write_attempts)

        for attempt in range(1, attempts + 1):
            forum.posts = update(list(forum.posts or []))
            try:
                await self.store.replace(forum)
                return attempt > 1
            except ConcurrentUpdate:
                if attempt == attempts:
                    raise
                logger.info(f"Forum {forum_id} changed underneath, retry {attempt}/{attempts - 1}")

            forum = await self.store.reload(Forum, forum_id)
            if forum is None:
                logger.warning(f"Forum {forum_id} vanished while updating its references")
                return True

        return True
