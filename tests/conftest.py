"""Shared test fixtures and configuration.

Provides fakes and fixtures for testing the Story Carousel components.
Renderer and publish API fixtures are async-compatible so they can be
awaited like the real implementations.
"""

from __future__ import annotations

import asyncio
import random
from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock

import pytest

from story_carousel.config import CarouselConfig
from story_carousel.content.models import Story
from story_carousel.instagram.models import PublishReceipt
from story_carousel.monitoring.errors import RenderError
from story_carousel.monitoring.monitor import ErrorMonitor
from story_carousel.rendering.models import RenderedImage, RenderOptions
from story_carousel.storage.story_store import JsonStoryStore

PARAGRAPH = (
    "The colony ship drifted past the last beacon while the crew slept in "
    "shifts, each of them counting the days until landfall on the new world."
)


class FakeRenderer:
    """In-memory renderer.

    Returns the markup bytes as the image. Markup matching `fail_when`
    raises RenderError; `delay` adds latency (a callable gives per-call
    latency).
    """

    def __init__(
        self,
        fail_when: Callable[[str], bool] | None = None,
        delay: float | Callable[[], float] = 0.0,
    ):
        self.fail_when = fail_when
        self.delay = delay
        self.calls: list[str] = []

    async def render(self, markup: str, options: RenderOptions) -> RenderedImage:
        self.calls.append(markup)
        delay = self.delay() if callable(self.delay) else self.delay
        if delay:
            await asyncio.sleep(delay)
        if self.fail_when is not None and self.fail_when(markup):
            raise RenderError("browser crashed")
        return RenderedImage(
            data=b"IMG:" + markup.encode("utf-8"),
            format=options.format,
            width=options.width,
            height=options.height,
        )


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def renderer_cls() -> type[FakeRenderer]:
    """The FakeRenderer class, for tests that configure or subclass it."""
    return FakeRenderer


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    """Renderer that always succeeds."""
    return FakeRenderer()


@pytest.fixture
def jittery_renderer() -> FakeRenderer:
    """Renderer with random per-call latency."""
    rng = random.Random(7)
    return FakeRenderer(delay=lambda: rng.uniform(0, 0.02))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def monitor() -> ErrorMonitor:
    return ErrorMonitor()


@pytest.fixture
def render_options() -> RenderOptions:
    """Small, fast render options."""
    return RenderOptions(width=100, height=100, device_scale=1.0, timeout_ms=1000)


@pytest.fixture
def config(tmp_path: Path) -> CarouselConfig:
    """Config with no batch pause and stories under tmp_path."""
    return CarouselConfig(
        batch={"batch_size": 2, "batch_pause_seconds": 0},
        render={"timeout_ms": 1000, "fallback_timeout_ms": 500},
        stories_dir=str(tmp_path / "stories"),
    )


@pytest.fixture
def story() -> Story:
    """A plain story with three paragraphs and no original image."""
    return Story(
        id="story-1",
        title="Landfall",
        body="\n\n".join([PARAGRAPH] * 3),
        year=2150,
    )


@pytest.fixture
def story_with_original(story: Story) -> Story:
    return story.model_copy(update={"id": "story-2", "original_image": b"ORIGINAL-PNG"})


@pytest.fixture
def story_store(tmp_path: Path, story: Story, story_with_original: Story) -> JsonStoryStore:
    """Store with both sample stories saved."""
    store = JsonStoryStore(tmp_path / "stories")
    store.save_story(story)
    store.save_story(story_with_original)
    return store


@pytest.fixture
def mock_publish_api() -> AsyncMock:
    """Create a mock publish API.

    Returns:
        AsyncMock whose publish() returns a receipt for post "post-123".
    """
    api = AsyncMock()
    api.publish.return_value = PublishReceipt(
        post_id="post-123",
        permalink="https://www.instagram.com/p/abc123/",
    )
    return api


@pytest.fixture
def mock_resolver() -> AsyncMock:
    """Create a mock media resolver returning one URL per rendered slide."""
    resolver = AsyncMock()

    async def _resolve(story, images):
        refs = [f"https://cdn.example.com/{story.id}/{image.ordinal}" for image in images.images]
        return refs or [f"https://cdn.example.com/{story.id}/0"]

    resolver.resolve.side_effect = _resolve
    resolver.release.return_value = 0
    return resolver
