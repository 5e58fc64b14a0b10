"""Plan the slide sequence for a story."""

from __future__ import annotations

from ..config import BrandSettings
from ..constants import INSTAGRAM_CAROUSEL_MAX_SLIDES
from ..design.templates import StyleProfile, branding_slide, content_slide, title_slide
from .chunker import ContentChunker, content_slide_budget
from .models import SlideKind, SlideSpec, Story


class SlidePlanner:
    """Turn a story into ordered SlideSpecs.

    Order: original image (when present), title, content chunks,
    branding (only while under the carousel limit).
    """

    def __init__(
        self,
        chunker: ContentChunker | None = None,
        brand: BrandSettings | None = None,
        max_slides: int = INSTAGRAM_CAROUSEL_MAX_SLIDES,
    ):
        self.chunker = chunker or ContentChunker()
        self.brand = brand or BrandSettings()
        self.max_slides = max_slides

    def plan(self, story: Story, profile: StyleProfile) -> list[SlideSpec]:
        """Build slide specs with contiguous ordinals."""
        slides: list[SlideSpec] = []

        def add(kind: SlideKind, markup: str | None, description: str) -> None:
            slides.append(SlideSpec(
                ordinal=len(slides),
                kind=kind,
                markup=markup,
                description=description,
            ))

        if story.has_original:
            add(SlideKind.ORIGINAL, None, "Original story image")

        add(SlideKind.TITLE, title_slide(story.title, story.year, profile), "Story title and setting")

        budget = content_slide_budget(story.has_original)
        for part, chunk in enumerate(self.chunker.chunk(story.body, max_chunks=budget), start=1):
            add(SlideKind.CONTENT, content_slide(chunk, profile), f"Story content - Part {part}")

        if len(slides) < self.max_slides:
            add(
                SlideKind.BRANDING,
                branding_slide(self.brand.name, self.brand.tagline, profile),
                f"Created with {self.brand.name}",
            )

        return slides
