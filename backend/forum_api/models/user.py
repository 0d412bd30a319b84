"""
User model.

Identity lives elsewhere; only the followed-forum list is used here.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from forum_api.core.database import Base
from forum_api.models.forum import new_id


class User(Base):
    """User account model."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    username: Mapped[str] = mapped_column(String(100), unique=True, index=True)

    # [{"forum": <forum id>}, ...] in follow order
    forums: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    revision: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": revision}

    def __repr__(self) -> str:
        return f"<User {self.username}>"
