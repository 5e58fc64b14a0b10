"""Tests for keyword-based story classification."""

from story_carousel.content.classifier import ThemeClassifier
from story_carousel.design.templates import STYLE_PROFILES


class TestThemeClassifier:
    """Tests for ThemeClassifier."""

    def test_hopeful_nature_story(self):
        """Test that a peaceful earth story is solarpunk with a nature palette."""
        analysis = ThemeClassifier().classify("Green Earth", "The forest grew green under peaceful skies.")

        assert analysis.themes == ["sustainability"]
        assert analysis.mood == "hopeful"
        assert analysis.genre == "solarpunk"
        assert analysis.visual_theme == "nature"
        assert analysis.key_words == ["green", "earth", "forest", "under", "peaceful"]

    def test_exploration_overrides_dark_genre(self):
        """Test that exploration wins the genre even when the mood is dark."""
        analysis = ThemeClassifier().classify("Dark Galaxy", "War spread across the galaxy.")

        assert analysis.themes == ["exploration"]
        assert analysis.mood == "dark"
        assert analysis.genre == "spaceopera"
        assert analysis.visual_theme == "space"

    def test_dark_mood_gives_cyberpunk_genre(self):
        analysis = ThemeClassifier().classify("Fear", "Fear and destruction.")
        assert analysis.mood == "dark"
        assert analysis.genre == "cyberpunk"

    def test_keywords_match_as_substrings(self):
        """Test that short keywords match inside longer words."""
        analysis = ThemeClassifier().classify("Said the captain", "")
        assert analysis.themes == ["technology"]
        assert analysis.visual_theme == "cyberpunk"

    def test_empty_story(self):
        """Test that empty text gets neutral defaults."""
        analysis = ThemeClassifier().classify("", "")

        assert analysis.themes == []
        assert analysis.mood == "neutral"
        assert analysis.genre == "scifi"
        assert analysis.visual_theme == "default"
        assert analysis.key_words == []

    def test_balanced_mood_is_neutral(self):
        analysis = ThemeClassifier().classify("", "hope and fear")
        assert analysis.mood == "neutral"

    def test_style_for_visual_theme(self):
        classifier = ThemeClassifier()
        analysis = classifier.classify("Green Earth", "The forest grew green under peaceful skies.")
        assert classifier.style_for(analysis) == STYLE_PROFILES["nature"]
