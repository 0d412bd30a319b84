"""
Post API Endpoints.

Posts, likes, comments and the following feed.
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from forum_api.api.v1.serializers import post_to_dict
from forum_api.core.database import get_db
from forum_api.core.security import get_current_user_id
from forum_api.modules.forum import EngagementService, FeedService, PostService

router = APIRouter()


# ==================== Schemas ====================


class CreatePostRequest(BaseModel):
    """Create new post."""

    title: str = Field(..., min_length=1, max_length=200)
    text: str = Field(..., min_length=1, max_length=42000)


class CreateCommentRequest(BaseModel):
    """Comment on a post."""

    text: str = Field(..., min_length=1, max_length=1000)


# ==================== Posts ====================


@router.post("/{forum_id}")
async def create_post(
    forum_id: str,
    request: CreatePostRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Create a post in a forum."""
    posts = PostService(db)
    post = await posts.create_post(
        forum_id=forum_id,
        user_id=user_id,
        title=request.title,
        text=request.text,
    )
    return post_to_dict(post)


@router.get("")
async def get_posts(
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Get all posts, newest first."""
    posts = await PostService(db).list_posts()
    return [post_to_dict(p) for p in posts]


@router.get("/recent/30")
async def get_recent_posts(
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Get the 30 most recent posts."""
    posts = await PostService(db).list_recent_posts()
    return [post_to_dict(p) for p in posts]


@router.get("/forum/{forum_name}")
async def get_forum_posts(
    forum_name: str,
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Get all posts of a forum."""
    posts = await PostService(db).list_forum_posts(forum_name)
    return [post_to_dict(p) for p in posts]


@router.get("/user/following")
async def get_following_feed(
    user_id: str = Depends(get_current_user_id),
) -> list[dict[str, Any]]:
    """Get the latest posts of every forum the caller follows."""
    posts = await FeedService().following_feed(user_id)
    return [post_to_dict(p) for p in posts]


@router.get("/{post_id}")
async def get_post(
    post_id: str,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Get post by ID."""
    post = await PostService(db).get_post(post_id)
    return post_to_dict(post)


@router.delete("/{post_id}")
async def delete_post(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Delete a post owned by the caller."""
    await PostService(db).delete_post(post_id, user_id)
    return {"msg": "Post deleted"}


# ==================== Post likes ====================


@router.put("/like/{post_id}")
async def like_post(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Like a post."""
    return await EngagementService(db).like_post(post_id, user_id)


@router.put("/unlike/{post_id}")
async def unlike_post(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Remove like from post."""
    return await EngagementService(db).unlike_post(post_id, user_id)


# ==================== Comments ====================


@router.post("/comment/{post_id}")
async def add_comment(
    post_id: str,
    request: CreateCommentRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Comment on a post."""
    return await EngagementService(db).add_comment(post_id, user_id, request.text)


@router.delete("/comment/{post_id}/{comment_id}")
async def delete_comment(
    post_id: str,
    comment_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Delete a comment owned by the caller."""
    return await EngagementService(db).delete_comment(post_id, comment_id, user_id)


@router.put("/like/{post_id}/{comment_id}")
async def like_comment(
    post_id: str,
    comment_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Like a comment."""
    return await EngagementService(db).like_comment(post_id, comment_id, user_id)


@router.put("/unlike/{post_id}/{comment_id}")
async def unlike_comment(
    post_id: str,
    comment_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Remove like from comment."""
    return await EngagementService(db).unlike_comment(post_id, comment_id, user_id)
