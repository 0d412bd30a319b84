"""
Forum Module - Community discussions.

Features:
- Forums and the posts they reference
- Likes and comments embedded in posts
- Following feed across followed forums
"""

from forum_api.modules.forum.engagement import EngagementService
from forum_api.modules.forum.feed import FeedService
from forum_api.modules.forum.posts import PostService
from forum_api.modules.forum.service import ForumService

__all__ = [
    "EngagementService",
    "FeedService",
    "ForumService",
    "PostService",
]
