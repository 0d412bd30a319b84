"""
Shared lookups over forum documents.

Resolvers raise the matching ``NotFound`` error; the like helpers
enforce one like per user on any like list.
"""

from typing import Any

from forum_api.core.exceptions import (
    AlreadyLiked,
    CommentNotFound,
    ForumNotFound,
    NotYetLiked,
    PostNotFound,
    UserNotFound,
)
from forum_api.core.store import EntityStore
from forum_api.models.forum import Forum, Post
from forum_api.models.user import User


async def require_forum(store: EntityStore, forum_id: str) -> Forum:
    forum = await store.get_by_id(Forum, forum_id)
    if forum is None:
        raise ForumNotFound()
    return forum


async def require_post(store: EntityStore, post_id: str) -> Post:
    post = await store.get_by_id(Post, post_id)
    if post is None:
        raise PostNotFound()
    return post


async def require_user(store: EntityStore, user_id: str) -> User:
    user = await store.get_by_id(User, user_id)
    if user is None:
        raise UserNotFound()
    return user


def find_comment(post: Post, comment_id: str) -> tuple[int, dict[str, Any]]:
    """Locate a comment by id; returns its position and the comment."""
    for index, comment in enumerate(post.comments or []):
        if comment.get("id") == comment_id:
            return index, comment
    raise CommentNotFound()


# ==================== Likes ====================


def has_liked(likes: list[dict[str, Any]], user_id: str) -> bool:
    return any(like.get("user") == user_id for like in likes)


def add_like(
    likes: list[dict[str, Any]],
    user_id: str,
    target: str = "Post",
) -> list[dict[str, Any]]:
    """
    Return a new like list with the user's like in front.

    Raises:
        AlreadyLiked: If the user already liked the target
    """
    if has_liked(likes, user_id):
        raise AlreadyLiked(f"{target} already liked")
    return [{"user": user_id}, *likes]


def remove_like(
    likes: list[dict[str, Any]],
    user_id: str,
    target: str = "Post",
) -> list[dict[str, Any]]:
    """
    Return a new like list without the first like by the user.

    Raises:
        NotYetLiked: If the user has not liked the target
    """
    for index, like in enumerate(likes):
        if like.get("user") == user_id:
            return likes[:index] + likes[index + 1 :]
    raise NotYetLiked(f"{target} has not yet been liked")
