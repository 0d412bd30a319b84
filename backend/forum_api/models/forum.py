"""
Forum models for community discussions.

Includes:
- Forums (topics users follow)
- Posts, with their likes and comments embedded as JSON

A post is stored as one document: its likes and comments have no
table of their own and are rewritten together with the post.
"""

from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from forum_api.core.database import Base


def new_id() -> str:
    """Opaque document identifier."""
    return uuid4().hex


class Forum(Base):
    """Forum with a weak, newest-first list of post references."""

    __tablename__ = "forums"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    user: Mapped[str | None] = mapped_column(String(32), index=True)  # Creator

    # [{"post": <post id>}, ...]
    posts: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    revision: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": revision}

    def __repr__(self) -> str:
        return f"<Forum {self.name}>"


class Post(Base):
    """Post in a forum."""

    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(200))
    text: Mapped[str] = mapped_column(Text)

    forum: Mapped[str] = mapped_column(String(32), index=True)
    forum_name: Mapped[str] = mapped_column(String(100))  # Snapshot at creation

    user: Mapped[str] = mapped_column(String(32), index=True)
    username: Mapped[str] = mapped_column(String(100))  # Snapshot at creation

    # [{"user": <user id>}, ...]
    likes: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    # [{"id", "text", "name", "user", "date", "likes"}, ...]
    comments: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    date: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, index=True
    )
    revision: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": revision}

    def __repr__(self) -> str:
        return f"<Post {self.title[:30]} in {self.forum_name}>"
