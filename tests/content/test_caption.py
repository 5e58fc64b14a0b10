"""Tests for caption and hashtag generation."""

from story_carousel.config import BrandSettings
from story_carousel.content.caption import CaptionBuilder, dynamic_hashtags, thematic_intro
from story_carousel.content.models import Story, StoryAnalysis


class TestDynamicHashtags:
    """Tests for analysis-derived hashtags."""

    def test_genre_default_is_scifi(self):
        assert dynamic_hashtags(StoryAnalysis()) == ["#SciFi"]

    def test_duplicates_removed(self):
        """Test that a tag from both theme and genre appears once."""
        analysis = StoryAnalysis(themes=["sustainability"], genre="solarpunk")
        tags = dynamic_hashtags(analysis)
        assert tags.count("#Solarpunk") == 1
        assert tags == ["#ClimateChange", "#GreenFuture", "#Solarpunk"]

    def test_capped_at_eight(self):
        analysis = StoryAnalysis(
            themes=["technology", "sustainability", "humanity", "exploration", "time"],
            mood="hopeful",
            genre="spaceopera",
        )
        assert len(dynamic_hashtags(analysis)) == 8


class TestThematicIntro:
    """Tests for the opening line."""

    def test_mood_takes_precedence_over_theme(self):
        analysis = StoryAnalysis(themes=["technology"], mood="dark")
        assert thematic_intro(analysis).startswith("Step into a world where shadows")

    def test_theme_used_for_neutral_mood(self):
        analysis = StoryAnalysis(themes=["exploration"])
        assert thematic_intro(analysis).startswith("Beyond the stars")

    def test_default_intro(self):
        assert thematic_intro(StoryAnalysis()).startswith("A glimpse into tomorrow's world")


class TestCaptionBuilder:
    """Tests for CaptionBuilder."""

    def test_caption_sections(self):
        """Test that the caption carries title, details, hashtags and closing lines."""
        story = Story(id="1", title="Landfall", body="", year=2150)
        analysis = StoryAnalysis(themes=["exploration", "time"], mood="hopeful", genre="spaceopera")
        caption = CaptionBuilder().build(story, analysis)

        assert caption.startswith("Landfall\n\n")
        assert "Set in the year 2150\nThemes: exploration, time\nMood: hopeful" in caption
        assert "#StoryCarousel" in caption
        assert "#SpaceOpera" in caption
        assert caption.endswith("#carousel #story #fiction")

    def test_missing_year_and_themes(self):
        story = Story(id="1", title="Untitled")
        caption = CaptionBuilder().build(story, StoryAnalysis())
        assert "Set in the year the future\nMood: neutral" in caption
        assert "Themes:" not in caption

    def test_truncated_to_limit(self):
        """Test that the caption never exceeds the configured limit."""
        story = Story(id="1", title="T" * 3000)
        caption = CaptionBuilder().build(story, StoryAnalysis())
        assert len(caption) == 2200

    def test_custom_brand(self):
        """Test that brand hashtags and closing text come from settings."""
        brand = BrandSettings(
            base_hashtags=["#Mine"],
            caption_lines=[],
            closing_question="Thoughts?",
            closing_hashtags="",
        )
        builder = CaptionBuilder(brand)
        caption = builder.build(Story(id="1", title="X"), StoryAnalysis())

        assert builder.hashtags(StoryAnalysis()) == ["#Mine", "#SciFi"]
        assert caption.endswith("#Mine #SciFi\n\nThoughts?")

    def test_hashtags_capped_at_twenty(self):
        brand = BrandSettings(base_hashtags=[f"#Tag{i}" for i in range(25)])
        assert len(CaptionBuilder(brand).hashtags(StoryAnalysis())) == 20
