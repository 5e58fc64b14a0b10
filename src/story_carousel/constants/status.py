"""Status enums for Story Carousel.

State machine for sharing a story:
  NOT_SHARED -> SHARING -> SHARED
                   |
                   v (publish failed)
               NOT_SHARED
"""

from enum import Enum


class ShareState(str, Enum):
    """Sharing state of one story."""

    NOT_SHARED = "not_shared"
    """Story has never been published (or the last attempt failed)."""

    SHARING = "sharing"
    """A publish call is in flight for this story."""

    SHARED = "shared"
    """Story is live on the platform."""


class ShareOutcome(str, Enum):
    """Result category of a share request."""

    SHARED = "shared"
    ALREADY_SHARED = "already_shared"
    IN_PROGRESS = "in_progress"
    FAILED = "failed"


class ErrorType(str, Enum):
    """Error taxonomy used by the ErrorMonitor."""

    RENDER = "render"
    CACHE = "cache"
    PUBLISH_API = "publish_api"
    UNKNOWN = "unknown"


class PublishErrorCategory(str, Enum):
    """Publish API failure categories, derived from HTTP status or error code."""

    AUTH = "auth"
    FORBIDDEN = "forbidden"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    CLIENT_ERROR = "client_error"

    @property
    def is_retryable(self) -> bool:
        """Rate limits and server errors can be retried later."""
        return self in (PublishErrorCategory.RATE_LIMITED, PublishErrorCategory.SERVER_ERROR)
