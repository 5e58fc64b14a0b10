"""Story content: chunking, classification, captions and slide planning."""

from .caption import CaptionBuilder
from .chunker import ContentChunker, content_slide_budget
from .classifier import ThemeClassifier
from .models import (
    CarouselRecord,
    ShareStatus,
    SlideKind,
    SlideSpec,
    Story,
    StoryAnalysis,
)
from .planner import SlidePlanner

__all__ = [
    "CaptionBuilder",
    "CarouselRecord",
    "ContentChunker",
    "ShareStatus",
    "SlideKind",
    "SlidePlanner",
    "SlideSpec",
    "Story",
    "StoryAnalysis",
    "ThemeClassifier",
    "content_slide_budget",
]
