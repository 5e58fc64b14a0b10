"""Data models for stories and carousel content."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class SlideKind(str, Enum):
    """Type of slide in a carousel."""

    TITLE = "title"
    CONTENT = "content"
    BRANDING = "branding"
    ORIGINAL = "original"


class ShareStatus(BaseModel):
    """Persisted sharing status of a story."""

    shared: bool = False
    post_id: str | None = None
    shared_at: datetime | None = None
    slide_count: int = 0
    permalink: str | None = None


class Story(BaseModel):
    """A generated story, as held by the story store."""

    id: str
    title: str
    body: str = ""
    year: int | None = None
    existing_image_url: str | None = None

    # Raw bytes of the pre-existing image, stored beside the JSON record
    original_image: bytes | None = Field(default=None, exclude=True)

    share_status: ShareStatus = Field(default_factory=ShareStatus)

    @property
    def has_original(self) -> bool:
        """Whether the story carries a pre-existing image slide."""
        return bool(self.existing_image_url or self.original_image)


class StoryAnalysis(BaseModel):
    """Keyword-based classification of a story."""

    themes: list[str] = Field(default_factory=list)
    mood: str = "neutral"
    genre: str = "scifi"
    visual_theme: str = "default"
    key_words: list[str] = Field(default_factory=list)


class SlideSpec(BaseModel):
    """One planned slide.

    Ordinals are contiguous and define publish order. `original` slides
    carry no markup; their bytes come from the story itself.
    """

    ordinal: int
    kind: SlideKind
    markup: str | None = None
    description: str = ""

    @property
    def needs_render(self) -> bool:
        return self.kind != SlideKind.ORIGINAL


class CarouselRecord(BaseModel):
    """Carousel metadata for a story. Regeneration overwrites it."""

    story_id: str
    slides: list[SlideSpec] = Field(default_factory=list)
    caption: str = ""
    analysis: StoryAnalysis = Field(default_factory=StoryAnalysis)
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def slide_count(self) -> int:
        return len(self.slides)

    def get_slide(self, ordinal: int) -> SlideSpec | None:
        """Find a slide by ordinal."""
        for slide in self.slides:
            if slide.ordinal == ordinal:
                return slide
        return None
