"""
Users Module - user records and followed forums.
"""

from forum_api.modules.users.service import UserService

__all__ = ["UserService"]
