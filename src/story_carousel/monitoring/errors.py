"""Exception hierarchy for the carousel pipeline.

Every error carries a `kind` tag from the ErrorType taxonomy, which the
ErrorMonitor uses to classify it without inspecting messages.
"""

from __future__ import annotations

from ..constants import ErrorType, PublishErrorCategory


class CarouselError(Exception):
    """Base exception for carousel pipeline errors."""

    kind: ErrorType = ErrorType.UNKNOWN

    def __init__(self, message: str, kind: ErrorType | None = None):
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class RenderError(CarouselError):
    """A slide failed to render (including timeouts)."""

    kind = ErrorType.RENDER

    def __init__(self, message: str, ordinal: int | None = None):
        super().__init__(message)
        self.ordinal = ordinal


class CacheError(CarouselError):
    """A cache read or write fault."""

    kind = ErrorType.CACHE


class StoryNotFoundError(CarouselError):
    """The story store has no story with the given id."""

    def __init__(self, story_id: str):
        super().__init__(f"Story not found: {story_id}")
        self.story_id = story_id


def category_for_status(status_code: int | None) -> PublishErrorCategory:
    """Map an HTTP status code to a publish error category."""
    if status_code == 401:
        return PublishErrorCategory.AUTH
    if status_code == 403:
        return PublishErrorCategory.FORBIDDEN
    if status_code == 429:
        return PublishErrorCategory.RATE_LIMITED
    if status_code is None or status_code >= 500:
        return PublishErrorCategory.SERVER_ERROR
    return PublishErrorCategory.CLIENT_ERROR


class PublishApiError(CarouselError):
    """The social publish API rejected or failed a request."""

    kind = ErrorType.PUBLISH_API

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        category: PublishErrorCategory | None = None,
        retryable: bool | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.category = category or category_for_status(status_code)
        self.retryable = self.category.is_retryable if retryable is None else retryable
