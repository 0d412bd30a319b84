"""
JSON shaping for forum documents.
"""

from typing import Any

from forum_api.models.forum import Forum, Post
from forum_api.models.user import User


def post_to_dict(post: Post) -> dict[str, Any]:
    return {
        "id": post.id,
        "title": post.title,
        "text": post.text,
        "forum": post.forum,
        "forum_name": post.forum_name,
        "user": post.user,
        "username": post.username,
        "likes": post.likes or [],
        "comments": post.comments or [],
        "date": post.date.isoformat() if post.date else None,
    }


def forum_to_dict(forum: Forum) -> dict[str, Any]:
    return {
        "id": forum.id,
        "name": forum.name,
        "description": forum.description,
        "user": forum.user,
        "posts": forum.posts or [],
        "date": forum.date.isoformat() if forum.date else None,
    }


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "forums": user.forums or [],
        "date": user.date.isoformat() if user.date else None,
    }
