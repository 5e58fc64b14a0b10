"""Data models for slide rendering."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from ..constants import (
    RENDER_DEVICE_SCALE,
    RENDER_HEIGHT,
    RENDER_QUALITY,
    RENDER_TIMEOUT_MS,
    RENDER_WIDTH,
)


class RenderOptions(BaseModel):
    """Options for one render call. Part of the cache fingerprint."""

    width: int = RENDER_WIDTH
    height: int = RENDER_HEIGHT
    format: Literal["png", "jpeg"] = "png"
    quality: int = RENDER_QUALITY
    device_scale: float = RENDER_DEVICE_SCALE
    timeout_ms: int = RENDER_TIMEOUT_MS

    class Config:
        frozen = True


@dataclass(frozen=True)
class RenderedImage:
    """Raw output of a renderer."""

    data: bytes
    format: str
    width: int
    height: int


@dataclass(frozen=True)
class CachedImage:
    """A rendered image stored under its fingerprint. Never mutated."""

    data: bytes
    format: str
    width: int
    height: int
    fingerprint: str
    created_at: float = field(default_factory=time.time)


@dataclass(frozen=True)
class RenderedSlide:
    """Final image bytes for one slide ordinal."""

    ordinal: int
    data: bytes
    format: str
    is_fallback: bool = False


@dataclass
class PreGeneratedImageSet:
    """Rendered images for a story, ordered by ordinal."""

    story_id: str
    images: list[RenderedSlide] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def fallback_count(self) -> int:
        return sum(1 for image in self.images if image.is_fallback)

    def get(self, ordinal: int) -> RenderedSlide | None:
        for image in self.images:
            if image.ordinal == ordinal:
                return image
        return None
