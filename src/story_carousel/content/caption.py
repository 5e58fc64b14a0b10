"""Caption and hashtag generation for story carousels."""

from __future__ import annotations

from ..config import BrandSettings
from ..constants import INSTAGRAM_CAPTION_MAX_LENGTH
from .models import Story, StoryAnalysis

THEME_HASHTAGS: dict[str, list[str]] = {
    "technology": ["#TechFiction", "#DigitalFuture"],
    "sustainability": ["#ClimateChange", "#GreenFuture", "#Solarpunk"],
    "humanity": ["#HumanNature", "#Society", "#Community"],
    "exploration": ["#SpaceExploration", "#CosmicStory", "#SpaceOpera"],
    "time": ["#TimeTravel", "#TemporalFiction"],
}

MOOD_HASHTAGS: dict[str, list[str]] = {
    "hopeful": ["#OptimisticFiction", "#HopefulFuture"],
    "dark": ["#DystopianFiction", "#DarkFuture"],
}

GENRE_HASHTAGS: dict[str, str] = {
    "cyberpunk": "#Cyberpunk",
    "solarpunk": "#Solarpunk",
    "spaceopera": "#SpaceOpera",
}

MAX_DYNAMIC_HASHTAGS = 8
MAX_HASHTAGS = 20
MAX_CAPTION_THEMES = 3


def _unique(tags: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for tag in tags:
        key = tag.lower()
        if key not in seen:
            seen.add(key)
            result.append(tag)
    return result


def dynamic_hashtags(analysis: StoryAnalysis) -> list[str]:
    """Hashtags derived from themes, mood and genre (at most 8)."""
    tags: list[str] = []
    for theme in analysis.themes:
        tags.extend(THEME_HASHTAGS.get(theme, []))
    tags.extend(MOOD_HASHTAGS.get(analysis.mood, []))
    tags.append(GENRE_HASHTAGS.get(analysis.genre, "#SciFi"))
    return _unique(tags)[:MAX_DYNAMIC_HASHTAGS]


def thematic_intro(analysis: StoryAnalysis) -> str:
    """Opening line chosen by mood, then by theme."""
    if analysis.mood == "hopeful":
        return "Imagine a future where possibilities are endless and hope prevails..."
    if analysis.mood == "dark":
        return "Step into a world where shadows define the future..."
    if "technology" in analysis.themes:
        return "Where technology meets humanity, extraordinary stories emerge..."
    if "exploration" in analysis.themes:
        return "Beyond the stars lies a universe of infinite possibilities..."
    return "A glimpse into tomorrow's world, where the extraordinary becomes reality..."


class CaptionBuilder:
    """Compose the post caption for a story.

    Usage:
        builder = CaptionBuilder(config.brand)
        caption = builder.build(story, analysis)
    """

    def __init__(
        self,
        brand: BrandSettings | None = None,
        max_length: int = INSTAGRAM_CAPTION_MAX_LENGTH,
    ):
        self.brand = brand or BrandSettings()
        self.max_length = max_length

    def hashtags(self, analysis: StoryAnalysis) -> list[str]:
        """Base + dynamic hashtags, capped at 20."""
        return _unique(self.brand.base_hashtags + dynamic_hashtags(analysis))[:MAX_HASHTAGS]

    def build(self, story: Story, analysis: StoryAnalysis) -> str:
        """Build the caption, truncated to the platform limit."""
        year = story.year if story.year else "the future"
        sections = [
            story.title,
            thematic_intro(analysis),
        ]

        details = [f"Set in the year {year}"]
        if analysis.themes:
            details.append(f"Themes: {', '.join(analysis.themes[:MAX_CAPTION_THEMES])}")
        details.append(f"Mood: {analysis.mood}")
        sections.append("\n".join(details))

        if self.brand.caption_lines:
            sections.append("\n".join(self.brand.caption_lines))
        sections.append(" ".join(self.hashtags(analysis)))
        sections.append(self.brand.closing_question)
        if self.brand.closing_hashtags:
            sections.append(self.brand.closing_hashtags)

        caption = "\n\n".join(section for section in sections if section)
        return caption[:self.max_length]
