"""Slide rendering: renderer, content-addressed cache, TTL cache."""

from .cache import RenderCache, fingerprint
from .models import (
    CachedImage,
    PreGeneratedImageSet,
    RenderedImage,
    RenderedSlide,
    RenderOptions,
)
from .ttl_cache import TTLCache

__all__ = [
    "CachedImage",
    "PreGeneratedImageSet",
    "RenderCache",
    "RenderOptions",
    "RenderedImage",
    "RenderedSlide",
    "TTLCache",
    "fingerprint",
]
