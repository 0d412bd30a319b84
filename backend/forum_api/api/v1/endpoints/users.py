"""
User API Endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from forum_api.api.v1.serializers import user_to_dict
from forum_api.core.database import get_db
from forum_api.core.security import create_access_token, get_current_user_id
from forum_api.modules.users import UserService

router = APIRouter()


class CreateUserRequest(BaseModel):
    """Register a user."""

    username: str = Field(..., min_length=1, max_length=100)


@router.post("")
async def create_user(
    request: CreateUserRequest,
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Register a user and issue an access token."""
    user = await UserService(db).create_user(request.username)
    return {
        "user": user_to_dict(user),
        "token": create_access_token(user.id),
    }


@router.get("/me")
async def get_me(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Get the caller's user record."""
    user = await UserService(db).get_user(user_id)
    return user_to_dict(user)
