"""Batched slide rendering with caching and per-slide fallback.

Slides are rendered in batches of `batch_size`. A batch renders
concurrently, batches run one after another with a short pause. Each
slide goes through three levels:

1. Render cache lookup, then primary render (options.timeout_ms)
2. Fallback placeholder markup render (fallback_timeout_ms)
3. Local Pillow placeholder

So `render_story` always returns an image for every rendered ordinal.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from ..constants import BATCH_PAUSE_SECONDS, BATCH_SIZE, FALLBACK_RENDER_TIMEOUT_MS, ErrorType
from ..content.models import SlideSpec
from ..design.composer import PlaceholderComposer
from ..design.templates import StyleProfile, fallback_slide
from ..monitoring.errors import RenderError
from ..monitoring.monitor import ErrorMonitor
from ..rendering.cache import RenderCache, fingerprint
from ..rendering.models import PreGeneratedImageSet, RenderedSlide, RenderOptions

if TYPE_CHECKING:
    from ..rendering.renderer import SlideRenderer

_logger = logging.getLogger("carousel.pipeline")


class BatchOrchestrator:
    """Render a story's slides in bounded concurrent batches.

    Usage:
        orchestrator = BatchOrchestrator(renderer, cache, monitor)
        image_set = await orchestrator.render_story(story.id, slides, RenderOptions())
    """

    def __init__(
        self,
        renderer: SlideRenderer,
        cache: RenderCache | None = None,
        monitor: ErrorMonitor | None = None,
        composer: PlaceholderComposer | None = None,
        batch_size: int = BATCH_SIZE,
        batch_pause_seconds: float = BATCH_PAUSE_SECONDS,
        fallback_timeout_ms: int = FALLBACK_RENDER_TIMEOUT_MS,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.renderer = renderer
        self.monitor = monitor or ErrorMonitor()
        self.cache = cache or RenderCache(monitor=self.monitor)
        self.composer = composer or PlaceholderComposer()
        self.batch_size = batch_size
        self.batch_pause_seconds = batch_pause_seconds
        self.fallback_timeout_ms = fallback_timeout_ms

    async def render_story(
        self,
        story_id: str,
        slides: list[SlideSpec],
        options: RenderOptions,
        profile: StyleProfile | None = None,
    ) -> PreGeneratedImageSet:
        """Render every non-original slide.

        Args:
            story_id: Story being rendered (for logging).
            slides: Planned slides. `original` slides are skipped.
            options: Render options shared by all slides.
            profile: Palette for the last-resort placeholder.

        Returns:
            Image set ordered by ordinal, one image per rendered slide.
        """
        to_render = [slide for slide in slides if slide.needs_render]
        batches = [
            to_render[i:i + self.batch_size]
            for i in range(0, len(to_render), self.batch_size)
        ]
        start = time.time()
        _logger.info(
            f"STORY:{story_id} | RENDER START | slides:{len(to_render)} | batches:{len(batches)}"
        )

        results: dict[int, RenderedSlide] = {}
        for index, batch in enumerate(batches):
            outcomes = await asyncio.gather(
                *(self.render_slide(story_id, slide, options, profile) for slide in batch),
                return_exceptions=True,
            )
            for slide, outcome in zip(batch, outcomes):
                if isinstance(outcome, BaseException):
                    if not isinstance(outcome, Exception):
                        raise outcome
                    _logger.error(
                        f"STORY:{story_id} | SLIDE:{slide.ordinal} | UNEXPECTED | "
                        f"{type(outcome).__name__}: {outcome}"
                    )
                    self.monitor.record_error(
                        outcome,
                        context={"story": story_id, "slide": slide.ordinal},
                    )
                    outcome = self._compose_placeholder(slide.ordinal, options, profile)
                results[slide.ordinal] = outcome

            if index < len(batches) - 1 and self.batch_pause_seconds > 0:
                await asyncio.sleep(self.batch_pause_seconds)

        image_set = PreGeneratedImageSet(
            story_id=story_id,
            images=[results[ordinal] for ordinal in sorted(results)],
        )
        _logger.info(
            f"STORY:{story_id} | RENDER DONE | images:{len(image_set.images)} | "
            f"fallbacks:{image_set.fallback_count} | {time.time() - start:.2f}s"
        )
        return image_set

    async def render_slide(
        self,
        story_id: str,
        slide: SlideSpec,
        options: RenderOptions,
        profile: StyleProfile | None = None,
    ) -> RenderedSlide:
        """Render one slide through the cache, falling back on failure."""
        fp = fingerprint(slide.markup or "", options)
        cached = self.cache.get(fp)
        if cached is not None:
            _logger.debug(f"STORY:{story_id} | SLIDE:{slide.ordinal} | CACHE HIT | {fp[:12]}")
            return RenderedSlide(ordinal=slide.ordinal, data=cached.data, format=cached.format)

        try:
            rendered = await asyncio.wait_for(
                self.renderer.render(slide.markup or "", options),
                timeout=options.timeout_ms / 1000,
            )
        except (RenderError, asyncio.TimeoutError) as e:
            self._record_render_failure(story_id, slide.ordinal, e, "primary", options.timeout_ms)
            return await self._render_fallback(story_id, slide.ordinal, options, profile)

        self.cache.store(fp, rendered)
        return RenderedSlide(ordinal=slide.ordinal, data=rendered.data, format=rendered.format)

    async def _render_fallback(
        self,
        story_id: str,
        ordinal: int,
        options: RenderOptions,
        profile: StyleProfile | None,
    ) -> RenderedSlide:
        fallback_options = options.model_copy(update={"timeout_ms": self.fallback_timeout_ms})
        try:
            rendered = await asyncio.wait_for(
                self.renderer.render(fallback_slide(ordinal), fallback_options),
                timeout=self.fallback_timeout_ms / 1000,
            )
        except (RenderError, asyncio.TimeoutError) as e:
            self._record_render_failure(story_id, ordinal, e, "fallback", self.fallback_timeout_ms)
            return self._compose_placeholder(ordinal, options, profile)

        _logger.warning(f"STORY:{story_id} | SLIDE:{ordinal} | FALLBACK RENDERED")
        return RenderedSlide(ordinal=ordinal, data=rendered.data, format=rendered.format, is_fallback=True)

    def _compose_placeholder(
        self,
        ordinal: int,
        options: RenderOptions,
        profile: StyleProfile | None,
    ) -> RenderedSlide:
        data = self.composer.compose(ordinal, options, profile)
        return RenderedSlide(ordinal=ordinal, data=data, format=options.format, is_fallback=True)

    def _record_render_failure(
        self,
        story_id: str,
        ordinal: int,
        error: BaseException,
        stage: str,
        timeout_ms: int,
    ) -> None:
        if isinstance(error, asyncio.TimeoutError):
            error = RenderError(f"Render timed out after {timeout_ms}ms", ordinal=ordinal)
        self.monitor.record_error(
            error,
            ErrorType.RENDER,
            context={"story": story_id, "slide": ordinal, "stage": stage},
        )
