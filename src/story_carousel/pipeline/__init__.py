"""Carousel pipeline: batch rendering, volatile store, publishing."""

from .batch import BatchOrchestrator
from .publisher import CarouselPublisher, MediaResolver, PublishApi, ShareResult
from .service import CarouselService
from .store import CarouselStore

__all__ = [
    "BatchOrchestrator",
    "CarouselPublisher",
    "CarouselService",
    "CarouselStore",
    "MediaResolver",
    "PublishApi",
    "ShareResult",
]
