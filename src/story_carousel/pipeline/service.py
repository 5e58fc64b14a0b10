"""Carousel service - composition root for the story-to-carousel pipeline.

Flow:
    story -> classify + chunk -> slide specs -> batch render (cache,
    fallback) -> carousel store -> publish once -> persist share status

Image serving reads the carousel store first and falls back to
rendering the single requested slide on demand.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Awaitable, Callable

from ..config import CarouselConfig, InstagramSettings
from ..content.caption import CaptionBuilder
from ..content.chunker import ContentChunker
from ..content.classifier import ThemeClassifier
from ..content.models import CarouselRecord, Story
from ..content.planner import SlidePlanner
from ..design.composer import PlaceholderComposer
from ..monitoring.errors import StoryNotFoundError
from ..monitoring.monitor import ErrorMonitor
from ..rendering.cache import RenderCache
from ..rendering.models import PreGeneratedImageSet, RenderOptions
from .batch import BatchOrchestrator
from .publisher import CarouselPublisher, MediaResolver, PublishApi, ShareResult
from .store import CarouselStore

if TYPE_CHECKING:
    from ..instagram.models import InstagramProgress
    from ..rendering.renderer import SlideRenderer
    from ..storage.story_store import StoryStore

_logger = logging.getLogger("carousel.pipeline")


class CarouselService:
    """Wire the pipeline components together.

    Components are injected for testing; anything not given is built
    from the config.

    Usage:
        service = CarouselService(config, story_store, renderer=renderer)
        record = service.prepare("42")
        images = await service.generate("42")
        result = await service.share("42")
    """

    def __init__(
        self,
        config: CarouselConfig,
        story_store: StoryStore,
        renderer: SlideRenderer | None = None,
        api: PublishApi | None = None,
        resolver: MediaResolver | None = None,
        monitor: ErrorMonitor | None = None,
        render_cache: RenderCache | None = None,
        store: CarouselStore | None = None,
        progress_callback: Callable[[InstagramProgress], Awaitable[None]] | None = None,
    ):
        self.config = config
        self.story_store = story_store
        self.monitor = monitor or ErrorMonitor(
            history_size=config.monitor.history_size,
            window_seconds=config.monitor.window_seconds,
            max_error_rate=config.monitor.max_error_rate,
            render_critical=config.monitor.render_critical,
            cache_critical=config.monitor.cache_critical,
        )
        self.render_cache = render_cache or RenderCache(
            max_size=config.cache.max_size,
            max_age=config.cache.max_age_seconds,
            disk_dir=Path(config.cache.disk_cache_dir) if config.cache.enable_disk_cache else None,
            enabled=config.cache.enabled,
            monitor=self.monitor,
        )
        self.store = store or CarouselStore(
            ttl_seconds=config.cache.store_ttl_seconds,
            max_entries=config.cache.store_max_entries,
        )

        self.classifier = ThemeClassifier()
        self.captions = CaptionBuilder(config.brand)
        self.planner = SlidePlanner(
            chunker=ContentChunker(
                soft_max=config.chunk.soft_max,
                floor=config.chunk.floor,
                hard_max=config.chunk.hard_max,
            ),
            brand=config.brand,
        )

        self._renderer = renderer
        self._orchestrator: BatchOrchestrator | None = None
        self._api = api
        self._resolver = resolver
        self._publisher: CarouselPublisher | None = None
        self._progress_callback = progress_callback

    # =========================================================================
    # Lazily built components
    # =========================================================================

    @property
    def renderer(self) -> SlideRenderer:
        if self._renderer is None:
            from ..rendering.renderer import PlaywrightRenderer

            self._renderer = PlaywrightRenderer(
                max_pages=self.config.render.max_pages,
                headless=self.config.render.headless,
            )
        return self._renderer

    @property
    def orchestrator(self) -> BatchOrchestrator:
        if self._orchestrator is None:
            self._orchestrator = BatchOrchestrator(
                renderer=self.renderer,
                cache=self.render_cache,
                monitor=self.monitor,
                composer=PlaceholderComposer(),
                batch_size=self.config.batch.batch_size,
                batch_pause_seconds=self.config.batch.batch_pause_seconds,
                fallback_timeout_ms=self.config.render.fallback_timeout_ms,
            )
        return self._orchestrator

    @property
    def publisher(self) -> CarouselPublisher:
        if self._publisher is None:
            settings = None
            if self._api is None or self._resolver is None:
                settings = InstagramSettings()
            if self._api is None:
                from ..instagram.client import InstagramClient

                missing = settings.missing_instagram()
                if missing:
                    raise ValueError(f"Missing required environment variables: {', '.join(missing)}")
                self._api = InstagramClient(
                    settings,
                    progress_callback=self._progress_callback,
                    poll_interval=self.config.publish.container_poll_interval,
                    max_wait_seconds=self.config.publish.container_max_wait_seconds,
                )
            if self._resolver is None:
                self._resolver = self._build_resolver(settings)
            self._publisher = CarouselPublisher(
                api=self._api,
                story_store=self.story_store,
                resolver=self._resolver,
                monitor=self.monitor,
            )
        return self._publisher

    def _build_resolver(self, settings: InstagramSettings) -> MediaResolver:
        if self.config.publish.media_host == "cloudinary":
            from ..instagram.uploader import CloudinaryResolver, CloudinaryUploader

            missing = settings.missing_cloudinary()
            if missing:
                raise ValueError(f"Missing required environment variables: {', '.join(missing)}")
            return CloudinaryResolver(CloudinaryUploader(settings, folder=self.config.publish.cloudinary_folder))

        from ..instagram.media import ServedUrlResolver

        return ServedUrlResolver(settings.carousel_public_base_url)

    def render_options(self) -> RenderOptions:
        render = self.config.render
        return RenderOptions(
            width=render.width,
            height=render.height,
            format=render.format,
            quality=render.quality,
            device_scale=render.device_scale,
            timeout_ms=render.timeout_ms,
        )

    # =========================================================================
    # Pipeline operations
    # =========================================================================

    def load_story(self, story_id: str) -> Story:
        story = self.story_store.get_story(story_id)
        if story is None:
            raise StoryNotFoundError(story_id)
        return story

    def build_record(self, story: Story) -> CarouselRecord:
        """Classify, plan and caption a story (no caching)."""
        analysis = self.classifier.classify(story.title, story.body)
        profile = self.classifier.style_for(analysis)
        return CarouselRecord(
            story_id=story.id,
            slides=self.planner.plan(story, profile),
            caption=self.captions.build(story, analysis),
            analysis=analysis,
        )

    def prepare(self, story_id: str, force: bool = False) -> CarouselRecord:
        """Carousel metadata for a story, built and stored on a miss."""
        previous = self.store.get_carousel(story_id)
        if previous is not None and not force:
            return previous

        story = self.load_story(story_id)
        record = self.build_record(story)
        if previous is not None and (previous.slides, previous.caption) != (record.slides, record.caption):
            # Images rendered from the old plan no longer match
            self.store.drop_images(story_id)
            _logger.info(f"STORY:{story_id} | PLAN CHANGED | pre-generated images dropped")
        self.store.set_carousel(record)
        _logger.info(
            f"STORY:{story_id} | PREPARED | slides:{record.slide_count} | "
            f"theme:{record.analysis.visual_theme} | mood:{record.analysis.mood}"
        )
        return record

    async def generate(self, story_id: str, force: bool = False) -> PreGeneratedImageSet:
        """Rendered images for a story, rendered and stored on a miss."""
        if not force:
            images = self.store.get_images(story_id)
            if images is not None:
                return images

        record = self.prepare(story_id, force=force)
        profile = self.classifier.style_for(record.analysis)
        images = await self.orchestrator.render_story(story_id, record.slides, self.render_options(), profile)
        self.store.set_images(images)
        return images

    async def share(self, story_id: str) -> ShareResult:
        """Publish a story's carousel once."""
        story = self.load_story(story_id)
        publisher = self.publisher
        record = self.prepare(story_id)
        if story.share_status.shared:
            # Skip rendering, the publisher returns the stored post
            return await publisher.publish(story, record, PreGeneratedImageSet(story_id=story_id))

        images = await self.generate(story_id)
        return await publisher.publish(story, record, images)

    async def serve_image(self, story_id: str, ordinal: int) -> bytes | None:
        """Image bytes for one slide.

        Order: stored original image (ordinal 0), pre-generated images,
        then an on-demand render of just that slide.
        """
        story = self.story_store.get_story(story_id)
        if story is None:
            return None

        record = self.store.get_carousel(story_id)
        if record is None:
            record = self.build_record(story)
            self.store.set_carousel(record)

        slide = record.get_slide(ordinal)
        if slide is None:
            return None
        if not slide.needs_render:
            return story.original_image

        image = self.store.get_image(story_id, ordinal)
        if image is not None:
            return image.data

        _logger.info(f"STORY:{story_id} | SLIDE:{ordinal} | ON-DEMAND RENDER")
        profile = self.classifier.style_for(record.analysis)
        rendered = await self.orchestrator.render_slide(story_id, slide, self.render_options(), profile)
        return rendered.data

    # =========================================================================
    # Maintenance
    # =========================================================================

    def cleanup(self) -> dict:
        """Evict expired entries from every cache."""
        result = self.store.cleanup()
        result["render_cache"] = self.render_cache.cleanup()
        _logger.info(f"CLEANUP | {result}")
        return result

    def health_report(self) -> dict:
        """JSON-serializable health snapshot."""
        return {
            "health": self.monitor.get_health_status().to_dict(),
            "metrics": self.monitor.get_metrics().to_dict(),
            "recent_errors": [r.to_dict() for r in self.monitor.get_error_history()],
            "cache": self.render_cache.stats(),
            "store": self.store.stats(),
        }

    async def close(self) -> None:
        """Release the renderer if it owns a browser."""
        close = getattr(self._renderer, "close", None)
        if close is not None:
            await close()
