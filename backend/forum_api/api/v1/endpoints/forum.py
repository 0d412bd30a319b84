"""
Forum API Endpoints.

Forum directory and following.
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from forum_api.api.v1.serializers import forum_to_dict, post_to_dict
from forum_api.core.database import get_db
from forum_api.core.security import get_current_user_id
from forum_api.modules.forum import ForumService
from forum_api.modules.users import UserService

router = APIRouter()


# ==================== Schemas ====================


class CreateForumRequest(BaseModel):
    """Create new forum."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=1000)


# ==================== Forums ====================


@router.post("")
async def create_forum(
    request: CreateForumRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Create new forum."""
    forum = await ForumService(db).create_forum(
        name=request.name,
        user_id=user_id,
        description=request.description,
    )
    return forum_to_dict(forum)


@router.get("")
async def get_forums(
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Get all forums."""
    forums = await ForumService(db).get_forums()
    return [forum_to_dict(f) for f in forums]


@router.get("/user/mine")
async def get_my_forums(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Get forums created by the caller."""
    forums = await ForumService(db).get_user_forums(user_id)
    return [forum_to_dict(f) for f in forums]


@router.get("/{name}")
async def get_forum(
    name: str,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Get forum by name with its posts."""
    forum, posts = await ForumService(db).get_forum(name)
    return {
        **forum_to_dict(forum),
        "posts": [post_to_dict(p) for p in posts],
    }


# ==================== Following ====================


@router.put("/follow/{forum_id}")
async def follow_forum(
    forum_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Follow a forum."""
    return await UserService(db).follow_forum(forum_id, user_id)


@router.put("/unfollow/{forum_id}")
async def unfollow_forum(
    forum_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[dict[str, Any]]:
    """Stop following a forum."""
    return await UserService(db).unfollow_forum(forum_id, user_id)
