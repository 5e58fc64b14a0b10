"""Global constants package for Story Carousel.

PACKAGE STRUCTURE:
-----------------
- limits.py   : Instagram limits, chunk budgets, render defaults, cache TTLs
- status.py   : Share state machine, error taxonomy

USAGE EXAMPLES:
--------------
    from story_carousel.constants import CACHE_TTL_SECONDS, ErrorType
"""

from .limits import (
    BATCH_PAUSE_SECONDS,
    BATCH_SIZE,
    BRANDING_SLIDE_SLOTS,
    CACHE_TTL_SECONDS,
    CHUNK_FLOOR,
    CHUNK_HARD_MAX,
    CHUNK_SOFT_MAX,
    ERROR_HISTORY_SIZE,
    FALLBACK_RENDER_TIMEOUT_MS,
    HEALTH_CACHE_CRITICAL,
    HEALTH_MAX_ERROR_RATE,
    HEALTH_RENDER_CRITICAL,
    HEALTH_WINDOW_SECONDS,
    INSTAGRAM_CAPTION_MAX_LENGTH,
    INSTAGRAM_CAROUSEL_MAX_SLIDES,
    INSTAGRAM_CAROUSEL_MIN_SLIDES,
    INSTAGRAM_HASHTAG_MAX_COUNT,
    RENDER_CACHE_MAX_SIZE,
    RENDER_DEVICE_SCALE,
    RENDER_HEIGHT,
    RENDER_MAX_PAGES,
    RENDER_QUALITY,
    RENDER_TIMEOUT_MS,
    RENDER_WIDTH,
    TITLE_SLIDE_SLOTS,
)
from .status import ErrorType, PublishErrorCategory, ShareOutcome, ShareState

__all__ = [
    # Limits
    "BATCH_PAUSE_SECONDS",
    "BATCH_SIZE",
    "BRANDING_SLIDE_SLOTS",
    "CACHE_TTL_SECONDS",
    "CHUNK_FLOOR",
    "CHUNK_HARD_MAX",
    "CHUNK_SOFT_MAX",
    "ERROR_HISTORY_SIZE",
    "FALLBACK_RENDER_TIMEOUT_MS",
    "HEALTH_CACHE_CRITICAL",
    "HEALTH_MAX_ERROR_RATE",
    "HEALTH_RENDER_CRITICAL",
    "HEALTH_WINDOW_SECONDS",
    "INSTAGRAM_CAPTION_MAX_LENGTH",
    "INSTAGRAM_CAROUSEL_MAX_SLIDES",
    "INSTAGRAM_CAROUSEL_MIN_SLIDES",
    "INSTAGRAM_HASHTAG_MAX_COUNT",
    "RENDER_CACHE_MAX_SIZE",
    "RENDER_DEVICE_SCALE",
    "RENDER_HEIGHT",
    "RENDER_MAX_PAGES",
    "RENDER_QUALITY",
    "RENDER_TIMEOUT_MS",
    "RENDER_WIDTH",
    "TITLE_SLIDE_SLOTS",
    # Status
    "ErrorType",
    "PublishErrorCategory",
    "ShareOutcome",
    "ShareState",
]
