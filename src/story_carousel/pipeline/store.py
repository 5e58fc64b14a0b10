"""Volatile carousel store bridging rendering and image serving.

Holds carousel metadata and pre-generated images per story. Nothing
here is authoritative: any miss can be rebuilt from the story.
"""

from __future__ import annotations

import time
from typing import Callable

from ..constants import CACHE_TTL_SECONDS
from ..content.models import CarouselRecord
from ..rendering.models import PreGeneratedImageSet, RenderedSlide
from ..rendering.ttl_cache import TTLCache


class CarouselStore:
    """Two TTL caches keyed by story id."""

    def __init__(
        self,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._carousels: TTLCache[CarouselRecord] = TTLCache(ttl_seconds, max_entries, clock)
        self._images: TTLCache[PreGeneratedImageSet] = TTLCache(ttl_seconds, max_entries, clock)

    def set_carousel(self, record: CarouselRecord) -> None:
        self._carousels.set(record.story_id, record)

    def get_carousel(self, story_id: str) -> CarouselRecord | None:
        return self._carousels.get(story_id)

    def set_images(self, image_set: PreGeneratedImageSet) -> None:
        self._images.set(image_set.story_id, image_set)

    def get_images(self, story_id: str) -> PreGeneratedImageSet | None:
        return self._images.get(story_id)

    def get_image(self, story_id: str, ordinal: int) -> RenderedSlide | None:
        """One pre-generated image by ordinal."""
        image_set = self._images.get(story_id)
        if image_set is None:
            return None
        return image_set.get(ordinal)

    def drop_images(self, story_id: str) -> None:
        self._images.delete(story_id)

    def invalidate(self, story_id: str) -> None:
        """Drop everything held for a story."""
        self._carousels.delete(story_id)
        self._images.delete(story_id)

    def cleanup(self) -> dict[str, int]:
        """Evict expired entries from both caches."""
        return {
            "carousel_metadata": self._carousels.cleanup(),
            "pre_generated_images": self._images.cleanup(),
        }

    def clear(self) -> None:
        self._carousels.clear()
        self._images.clear()

    def stats(self) -> dict:
        return {
            "carousel_metadata": self._carousels.stats(),
            "pre_generated_images": self._images.stats(),
        }
