"""Limit constants for Story Carousel.

This module contains all limits and constraints:
- Instagram carousel limits
- Slide chunking budgets
- Render defaults and timeouts
- Cache sizes and TTLs
- Health monitoring thresholds

MODIFICATION GUIDE:
------------------
- INSTAGRAM_* limits: Based on Instagram Graph API requirements
- CHUNK_* budgets: Tune together, CHUNK_FLOOR < CHUNK_SOFT_MAX <= CHUNK_HARD_MAX
- HEALTH_* thresholds: Used by ErrorMonitor.get_health_status()
"""

from typing import Final

# =============================================================================
# INSTAGRAM LIMITS
# =============================================================================

INSTAGRAM_CAPTION_MAX_LENGTH: Final[int] = 2200
"""Maximum caption length in characters for Instagram posts."""

INSTAGRAM_CAROUSEL_MIN_SLIDES: Final[int] = 2
"""Minimum slides in a carousel post."""

INSTAGRAM_CAROUSEL_MAX_SLIDES: Final[int] = 10
"""Maximum slides in a carousel post."""

INSTAGRAM_HASHTAG_MAX_COUNT: Final[int] = 30
"""Maximum number of hashtags allowed per post."""


# =============================================================================
# SLIDE CHUNKING
# =============================================================================

CHUNK_SOFT_MAX: Final[int] = 600
"""Preferred maximum characters on one content slide."""

CHUNK_FLOOR: Final[int] = 300
"""A chunk shorter than this keeps absorbing paragraphs."""

CHUNK_HARD_MAX: Final[int] = 900
"""Absolute maximum characters on one content slide."""

TITLE_SLIDE_SLOTS: Final[int] = 1
"""Slots reserved for the title slide."""

BRANDING_SLIDE_SLOTS: Final[int] = 1
"""Slots reserved for the closing branding slide."""


# =============================================================================
# RENDERING
# =============================================================================

RENDER_WIDTH: Final[int] = 1080
"""Default slide width in CSS pixels."""

RENDER_HEIGHT: Final[int] = 1080
"""Default slide height in CSS pixels."""

RENDER_QUALITY: Final[int] = 95
"""JPEG quality (ignored for PNG)."""

RENDER_DEVICE_SCALE: Final[float] = 2.0
"""Device scale factor passed to the renderer."""

RENDER_TIMEOUT_MS: Final[int] = 30000
"""Timeout for a primary slide render."""

FALLBACK_RENDER_TIMEOUT_MS: Final[int] = 10000
"""Timeout for a fallback placeholder render."""

RENDER_MAX_PAGES: Final[int] = 2
"""Maximum concurrently open browser pages."""

BATCH_SIZE: Final[int] = 2
"""Slides rendered concurrently in one batch."""

BATCH_PAUSE_SECONDS: Final[float] = 0.5
"""Pause between batches to give the renderer room."""


# =============================================================================
# CACHES
# =============================================================================

CACHE_TTL_SECONDS: Final[int] = 3600
"""Default time-to-live for every volatile cache (1 hour)."""

RENDER_CACHE_MAX_SIZE: Final[int] = 100
"""Maximum number of rendered images kept in memory."""


# =============================================================================
# HEALTH MONITORING
# =============================================================================

ERROR_HISTORY_SIZE: Final[int] = 100
"""Capacity of the error history ring."""

HEALTH_WINDOW_SECONDS: Final[int] = 300
"""Window used to compute the recent error rate (5 minutes)."""

HEALTH_MAX_ERROR_RATE: Final[float] = 2.0
"""Errors per minute at or above which the service is unhealthy."""

HEALTH_RENDER_CRITICAL: Final[int] = 5
"""Render errors above this count are critical."""

HEALTH_CACHE_CRITICAL: Final[int] = 10
"""Cache errors above this count are critical."""
