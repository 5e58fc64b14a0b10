"""Tests for batched slide rendering."""

import asyncio
from unittest.mock import patch

import pytest

from story_carousel.constants import ErrorType
from story_carousel.content.models import SlideKind, SlideSpec
from story_carousel.monitoring.monitor import ErrorMonitor
from story_carousel.pipeline.batch import BatchOrchestrator
from story_carousel.rendering.cache import RenderCache


def _slides(count: int, with_original: bool = False) -> list[SlideSpec]:
    slides = []
    if with_original:
        slides.append(SlideSpec(ordinal=0, kind=SlideKind.ORIGINAL))
    start = len(slides)
    for ordinal in range(start, start + count):
        slides.append(SlideSpec(ordinal=ordinal, kind=SlideKind.CONTENT, markup=f"<p>slide {ordinal}</p>"))
    return slides


class TestRenderStory:
    """Tests for BatchOrchestrator.render_story."""

    @pytest.mark.asyncio
    async def test_results_ordered_despite_random_latency(self, jittery_renderer, render_options):
        """Test that images come back in ordinal order whatever the completion order."""
        orchestrator = BatchOrchestrator(jittery_renderer, batch_size=3, batch_pause_seconds=0)
        images = await orchestrator.render_story("s", _slides(7), render_options)

        assert [image.ordinal for image in images.images] == list(range(7))
        assert all(image.data == f"IMG:<p>slide {image.ordinal}</p>".encode() for image in images.images)
        assert images.fallback_count == 0

    @pytest.mark.asyncio
    async def test_original_slide_skipped(self, fake_renderer, render_options):
        """Test that the original image slide is never rendered."""
        orchestrator = BatchOrchestrator(fake_renderer, batch_pause_seconds=0)
        images = await orchestrator.render_story("s", _slides(3, with_original=True), render_options)

        assert [image.ordinal for image in images.images] == [1, 2, 3]
        assert len(fake_renderer.calls) == 3

    @pytest.mark.asyncio
    async def test_failed_slide_uses_fallback_markup(self, renderer_cls, render_options):
        """Test that a failing slide is replaced by the fallback render and recorded."""
        renderer = renderer_cls(fail_when=lambda markup: "slide 2" in markup)
        monitor = ErrorMonitor()
        orchestrator = BatchOrchestrator(renderer, monitor=monitor, batch_pause_seconds=0)

        images = await orchestrator.render_story("s", _slides(5), render_options)

        assert [image.ordinal for image in images.images] == [0, 1, 2, 3, 4]
        fallback = images.get(2)
        assert fallback.is_fallback
        assert b"Slide 3" in fallback.data
        assert images.fallback_count == 1
        assert monitor.get_metrics().render_errors == 1

    @pytest.mark.asyncio
    async def test_all_renders_fail_gives_placeholders(self, renderer_cls, render_options):
        """Test that a dead renderer still yields one image per slide."""
        renderer = renderer_cls(fail_when=lambda markup: True)
        monitor = ErrorMonitor()
        orchestrator = BatchOrchestrator(renderer, monitor=monitor, batch_pause_seconds=0)

        images = await orchestrator.render_story("s", _slides(4), render_options)

        assert [image.ordinal for image in images.images] == [0, 1, 2, 3]
        assert all(image.is_fallback for image in images.images)
        assert all(image.data.startswith(b"\x89PNG") for image in images.images)
        assert monitor.get_metrics().render_errors == 8

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self, renderer_cls, render_options):
        """Test that a render exceeding its timeout is treated as a failure."""
        renderer = renderer_cls(delay=0.2)
        fast_timeout = render_options.model_copy(update={"timeout_ms": 50})
        orchestrator = BatchOrchestrator(renderer, batch_pause_seconds=0, fallback_timeout_ms=50)

        images = await orchestrator.render_story("s", _slides(1), fast_timeout)

        assert images.images[0].is_fallback
        assert orchestrator.monitor.get_metrics().render_errors == 2

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_placeholder(self, renderer_cls, render_options):
        """Test that a non-render exception in one slide does not sink the batch."""

        class BrokenRenderer(renderer_cls):
            async def render(self, markup, options):
                if "slide 1" in markup:
                    raise KeyError("boom")
                return await super().render(markup, options)

        monitor = ErrorMonitor()
        orchestrator = BatchOrchestrator(BrokenRenderer(), monitor=monitor, batch_pause_seconds=0)
        images = await orchestrator.render_story("s", _slides(3), render_options)

        assert [image.is_fallback for image in images.images] == [False, True, False]
        assert monitor.get_metrics().unknown_errors == 1
        assert monitor.get_error_history(1)[0].type == ErrorType.UNKNOWN

    @pytest.mark.asyncio
    async def test_batches_and_pauses(self, fake_renderer, render_options):
        """Test that the pause happens between batches only."""
        orchestrator = BatchOrchestrator(fake_renderer, batch_size=2, batch_pause_seconds=0.01)
        with patch("story_carousel.pipeline.batch.asyncio.sleep") as sleep:
            await orchestrator.render_story("s", _slides(5), render_options)

        assert sleep.call_count == 2

    @pytest.mark.asyncio
    async def test_zero_pause_never_sleeps(self, fake_renderer, render_options):
        orchestrator = BatchOrchestrator(fake_renderer, batch_size=1, batch_pause_seconds=0)
        with patch("story_carousel.pipeline.batch.asyncio.sleep") as sleep:
            await orchestrator.render_story("s", _slides(3), render_options)
        sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_batch_concurrency_bounded(self, renderer_cls, render_options):
        """Test that no more than batch_size renders run at once."""
        active = 0
        peak = 0

        class CountingRenderer(renderer_cls):
            async def render(self, markup, options):
                nonlocal active, peak
                active += 1
                peak = max(peak, active)
                await asyncio.sleep(0.01)
                active -= 1
                return await super().render(markup, options)

        orchestrator = BatchOrchestrator(CountingRenderer(), batch_size=2, batch_pause_seconds=0)
        await orchestrator.render_story("s", _slides(6), render_options)
        assert peak == 2

    @pytest.mark.asyncio
    async def test_empty_slides(self, fake_renderer, render_options):
        orchestrator = BatchOrchestrator(fake_renderer, batch_pause_seconds=0)
        images = await orchestrator.render_story("s", [], render_options)
        assert images.images == []

    def test_invalid_batch_size(self, fake_renderer):
        with pytest.raises(ValueError):
            BatchOrchestrator(fake_renderer, batch_size=0)


class TestRenderSlideCache:
    """Tests for cache use in render_slide."""

    @pytest.mark.asyncio
    async def test_second_render_hits_cache(self, fake_renderer, render_options):
        orchestrator = BatchOrchestrator(fake_renderer, cache=RenderCache(), batch_pause_seconds=0)
        slide = _slides(1)[0]

        first = await orchestrator.render_slide("s", slide, render_options)
        second = await orchestrator.render_slide("s", slide, render_options)

        assert first.data == second.data
        assert len(fake_renderer.calls) == 1

    @pytest.mark.asyncio
    async def test_fallback_not_cached(self, renderer_cls, render_options):
        """Test that fallback images are not stored under the slide's fingerprint."""
        renderer = renderer_cls(fail_when=lambda markup: "slide 0" in markup)
        cache = RenderCache()
        orchestrator = BatchOrchestrator(renderer, cache=cache, batch_pause_seconds=0)
        slide = _slides(1)[0]

        await orchestrator.render_slide("s", slide, render_options)
        await orchestrator.render_slide("s", slide, render_options)

        assert renderer.calls.count(slide.markup) == 2
        assert cache.stats()["memory_entries"] == 0
