"""Tests for slide planning."""

from story_carousel.content.models import SlideKind, Story
from story_carousel.content.planner import SlidePlanner
from story_carousel.design.templates import DEFAULT_PROFILE


def _long_body(paragraphs: int) -> str:
    return "\n\n".join(f"{'x' * 550} {i}" for i in range(paragraphs))


class TestSlidePlanner:
    """Tests for SlidePlanner.plan."""

    def test_plain_story_order(self, story):
        """Test title, content and branding slides in order with contiguous ordinals."""
        slides = SlidePlanner().plan(story, DEFAULT_PROFILE)

        kinds = [slide.kind for slide in slides]
        assert kinds[0] == SlideKind.TITLE
        assert kinds[-1] == SlideKind.BRANDING
        assert all(kind == SlideKind.CONTENT for kind in kinds[1:-1])
        assert [slide.ordinal for slide in slides] == list(range(len(slides)))
        assert "Landfall" in slides[0].markup
        assert "Year 2150" in slides[0].markup

    def test_original_image_first(self, story_with_original):
        """Test that the original image takes ordinal 0 and needs no render."""
        slides = SlidePlanner().plan(story_with_original, DEFAULT_PROFILE)

        assert slides[0].kind == SlideKind.ORIGINAL
        assert slides[0].markup is None
        assert not slides[0].needs_render
        assert slides[1].kind == SlideKind.TITLE

    def test_existing_image_url_counts_as_original(self):
        story = Story(id="s", title="T", body="Body.", existing_image_url="https://example.com/a.png")
        slides = SlidePlanner().plan(story, DEFAULT_PROFILE)
        assert slides[0].kind == SlideKind.ORIGINAL

    def test_long_story_stays_within_carousel_limit(self):
        """Test that a long story is cut to ten slides including branding."""
        story = Story(id="s", title="T", body=_long_body(15))
        slides = SlidePlanner().plan(story, DEFAULT_PROFILE)

        assert len(slides) == 10
        assert sum(1 for slide in slides if slide.kind == SlideKind.CONTENT) == 8
        assert slides[-1].kind == SlideKind.BRANDING

    def test_long_story_with_original(self):
        story = Story(id="s", title="T", body=_long_body(15), original_image=b"png")
        slides = SlidePlanner().plan(story, DEFAULT_PROFILE)

        assert len(slides) == 10
        assert sum(1 for slide in slides if slide.kind == SlideKind.CONTENT) == 7

    def test_branding_skipped_when_full(self):
        """Test that branding is dropped when the limit is already reached."""
        story = Story(id="s", title="T", body=_long_body(15))
        slides = SlidePlanner(max_slides=9).plan(story, DEFAULT_PROFILE)
        assert len(slides) == 9
        assert all(slide.kind != SlideKind.BRANDING for slide in slides)

    def test_empty_body(self):
        story = Story(id="s", title="T", body="")
        slides = SlidePlanner().plan(story, DEFAULT_PROFILE)
        assert [slide.kind for slide in slides] == [SlideKind.TITLE, SlideKind.BRANDING]

    def test_content_descriptions_numbered(self):
        story = Story(id="s", title="T", body=_long_body(2))
        slides = SlidePlanner().plan(story, DEFAULT_PROFILE)
        assert [slide.description for slide in slides if slide.kind == SlideKind.CONTENT] == [
            "Story content - Part 1",
            "Story content - Part 2",
        ]
