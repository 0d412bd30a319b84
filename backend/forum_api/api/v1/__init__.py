"""
API Version 1 Router.

Combines all API endpoints under /api/v1 prefix.
"""

from fastapi import APIRouter

from forum_api.api.v1.endpoints import forum, posts, users

router = APIRouter()

# Include endpoint routers
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(forum.router, prefix="/forums", tags=["Forums"])
router.include_router(posts.router, prefix="/posts", tags=["Posts"])
