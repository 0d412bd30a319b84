"""
Domain errors.

Every error carries the HTTP status it maps to; the handler in
``forum_api.main`` renders them as ``{"msg": ...}``.
"""


class ForumError(Exception):
    """Base class for all forum domain errors."""

    status_code: int = 400
    message: str = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


# ==================== Not found ====================


class NotFound(ForumError):
    status_code = 404
    message = "Resource not found"


class ForumNotFound(NotFound):
    message = "Forum not found"


class PostNotFound(NotFound):
    message = "Post not found"


class CommentNotFound(NotFound):
    message = "Comment does not exist"


class UserNotFound(NotFound):
    message = "User not found"


# ==================== Ownership ====================


class Unauthorized(ForumError):
    status_code = 401
    message = "User not authorized"


class AuthenticationFailed(Unauthorized):
    """Missing, malformed or expired ``x-auth-token``."""

    message = "Token is not valid"


# ==================== Idempotency guards ====================


class AlreadyLiked(ForumError):
    message = "Already liked"


class NotYetLiked(ForumError):
    message = "Has not yet been liked"


class AlreadyFollowing(ForumError):
    message = "Forum already followed"


class NotYetFollowing(ForumError):
    message = "Forum is not followed"


class ForumNameTaken(ForumError):
    message = "Forum name already exists"


class UsernameTaken(ForumError):
    message = "Username already exists"


# ==================== Store ====================


class DuplicateDocument(ForumError):
    """A unique secondary key already exists."""

    message = "Document already exists"


class ConcurrentUpdate(ForumError):
    status_code = 409
    message = "Document was modified concurrently, try again"


class StoreUnavailable(ForumError):
    status_code = 503
    message = "Storage unavailable"
