"""Error taxonomy, exceptions and health monitoring."""

from .errors import (
    CacheError,
    CarouselError,
    PublishApiError,
    RenderError,
    StoryNotFoundError,
    category_for_status,
)
from .monitor import ErrorMetrics, ErrorMonitor, ErrorRecord, HealthStatus, classify_error

__all__ = [
    "CacheError",
    "CarouselError",
    "ErrorMetrics",
    "ErrorMonitor",
    "ErrorRecord",
    "HealthStatus",
    "PublishApiError",
    "RenderError",
    "StoryNotFoundError",
    "category_for_status",
    "classify_error",
]
