"""
Engagement Service - likes and comments embedded in a post.

Comments and likes have no storage of their own: every change rewrites
the containing post. Lists are newest first.
"""

from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from forum_api.core.exceptions import Unauthorized
from forum_api.core.store import EntityStore
from forum_api.models.forum import Post, new_id
from forum_api.modules.forum.access import (
    add_like,
    find_comment,
    remove_like,
    require_post,
    require_user,
)


class EngagementService:
    """
    Service for post likes, comments and comment likes.

    Usage:
        engagement = EngagementService(db_session)
        likes = await engagement.like_post(post_id, user_id)
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize engagement service with database session."""
        self.store = EntityStore(db)

    # ==================== Post likes ====================

    async def like_post(self, post_id: str, user_id: str) -> list[dict[str, Any]]:
        """
        Like a post.

        Returns:
            Updated like list

        Raises:
            PostNotFound: If the post does not exist
            AlreadyLiked: If the caller already liked it
        """
        post = await require_post(self.store, post_id)
        post.likes = add_like(post.likes or [], user_id)
        await self.store.replace(post)
        return post.likes

    async def unlike_post(self, post_id: str, user_id: str) -> list[dict[str, Any]]:
        """Remove the caller's like from a post."""
        post = await require_post(self.store, post_id)
        post.likes = remove_like(post.likes or [], user_id)
        await self.store.replace(post)
        return post.likes

    # ==================== Comments ====================

    async def add_comment(
        self,
        post_id: str,
        user_id: str,
        text: str,
    ) -> list[dict[str, Any]]:
        """
        Add a comment in front of the post's comments.

        Returns:
            Updated comment list
        """
        post = await require_post(self.store, post_id)
        author = await require_user(self.store, user_id)

        comment = {
            "id": new_id(),
            "text": text,
            "name": author.username,
            "user": author.id,
            "date": datetime.utcnow().isoformat(),
            "likes": [],
        }
        post.comments = [comment, *(post.comments or [])]
        await self.store.replace(post)

        logger.info(f"Comment {comment['id']} added to post {post_id}")
        return post.comments

    async def delete_comment(
        self,
        post_id: str,
        comment_id: str,
        user_id: str,
    ) -> list[dict[str, Any]]:
        """
        Delete a comment authored by the caller.

        Raises:
            PostNotFound: If the post does not exist
            CommentNotFound: If the comment does not exist
            Unauthorized: If the caller is not the comment author
        """
        post = await require_post(self.store, post_id)
        index, comment = find_comment(post, comment_id)
        if comment.get("user") != user_id:
            raise Unauthorized()

        # Remove the located comment, not the caller's first comment
        post.comments = post.comments[:index] + post.comments[index + 1 :]
        await self.store.replace(post)

        logger.info(f"Comment {comment_id} deleted from post {post_id}")
        return post.comments

    # ==================== Comment likes ====================

    async def like_comment(
        self,
        post_id: str,
        comment_id: str,
        user_id: str,
    ) -> list[dict[str, Any]]:
        """Like a comment; returns the comment's updated like list."""
        post = await require_post(self.store, post_id)
        index, comment = find_comment(post, comment_id)
        likes = add_like(comment.get("likes") or [], user_id, target="Comment")
        await self._replace_comment(post, index, {**comment, "likes": likes})
        return likes

    async def unlike_comment(
        self,
        post_id: str,
        comment_id: str,
        user_id: str,
    ) -> list[dict[str, Any]]:
        """Remove the caller's like from a comment."""
        post = await require_post(self.store, post_id)
        index, comment = find_comment(post, comment_id)
        likes = remove_like(comment.get("likes") or [], user_id, target="Comment")
        await self._replace_comment(post, index, {**comment, "likes": likes})
        return likes

    async def _replace_comment(
        self,
        post: Post,
        index: int,
        comment: dict[str, Any],
    ) -> None:
        comments = list(post.comments)
        comments[index] = comment
        post.comments = comments
        await self.store.replace(post)
