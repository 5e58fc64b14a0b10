"""Keyword-based story classification.

Matching is case-insensitive substring presence over title + body, so
short keywords such as "ai" also match inside longer words. Rule order
matters: genre rules are applied in sequence (later rules win) and the
visual theme takes the first matching rule.
"""

from __future__ import annotations

import re

from ..design.templates import StyleProfile, get_style_profile
from .models import StoryAnalysis

THEME_KEYWORDS: dict[str, tuple[str, ...]] = {
    "technology": ("technology", "ai", "robot", "digital"),
    "sustainability": ("nature", "environment", "earth", "climate"),
    "humanity": ("society", "community", "people", "human"),
    "exploration": ("space", "planet", "galaxy", "star"),
    "time": ("time", "past", "future", "dimension"),
}

POSITIVE_WORDS: tuple[str, ...] = (
    "hope", "bright", "peace", "harmony", "success", "beautiful", "wonderful",
)
NEGATIVE_WORDS: tuple[str, ...] = (
    "dark", "war", "destruction", "fear", "dystopia", "collapse", "danger",
)

VISUAL_THEME_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("cyberpunk", ("cyber", "digital", "ai", "robot")),
    ("nature", ("nature", "forest", "green", "earth")),
    ("space", ("space", "star", "planet", "galaxy")),
    ("dystopian", ("war", "dark", "destroy", "apocalypse")),
    ("utopian", ("peace", "harmony", "perfect", "paradise")),
)

_STOP_WORDS = frozenset({
    "the", "and", "that", "with", "they", "this", "from", "were", "been", "have",
    "their", "there", "which", "would", "could", "about",
})

KEY_WORD_COUNT = 5


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


class ThemeClassifier:
    """Classify a story into themes, mood, genre and visual theme."""

    def classify(self, title: str, body: str) -> StoryAnalysis:
        """Analyze story text. Never raises for string input."""
        text = f"{title or ''} {body or ''}".lower()

        themes = [
            theme for theme, keywords in THEME_KEYWORDS.items()
            if _contains_any(text, keywords)
        ]
        mood = self._detect_mood(text)

        return StoryAnalysis(
            themes=themes,
            mood=mood,
            genre=self._detect_genre(themes, mood),
            visual_theme=self._detect_visual_theme(text),
            key_words=self._extract_key_words(text),
        )

    def style_for(self, analysis: StoryAnalysis) -> StyleProfile:
        """Palette matching the analysis' visual theme."""
        return get_style_profile(analysis.visual_theme)

    def _detect_mood(self, text: str) -> str:
        positive = sum(1 for word in POSITIVE_WORDS if word in text)
        negative = sum(1 for word in NEGATIVE_WORDS if word in text)
        if positive > negative:
            return "hopeful"
        if negative > positive:
            return "dark"
        return "neutral"

    def _detect_genre(self, themes: list[str], mood: str) -> str:
        genre = "scifi"
        if "sustainability" in themes:
            genre = "solarpunk"
        if mood == "dark":
            genre = "cyberpunk"
        if "exploration" in themes:
            genre = "spaceopera"
        return genre

    def _detect_visual_theme(self, text: str) -> str:
        for name, keywords in VISUAL_THEME_KEYWORDS:
            if _contains_any(text, keywords):
                return name
        return "default"

    def _extract_key_words(self, text: str) -> list[str]:
        words = re.findall(r"[a-z][a-z'-]*", text)
        key_words: list[str] = []
        for word in words:
            if len(word) > 4 and word not in _STOP_WORDS and word not in key_words:
                key_words.append(word)
            if len(key_words) == KEY_WORD_COUNT:
                break
        return key_words
