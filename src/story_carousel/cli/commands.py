"""Carousel CLI commands - thin wrappers over CarouselService and display."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import typer

from ..config import load_config
from ..instagram.models import InstagramProgress
from ..monitoring.errors import CarouselError, StoryNotFoundError
from ..pipeline.service import CarouselService
from ..storage.story_store import JsonStoryStore
from .console import console, print_error, print_success
from .display import (
    show_carousel_preview,
    show_cleanup_result,
    show_health_report,
    show_publish_progress,
    show_render_result,
    show_share_result,
    show_stories_table,
    show_story_status,
)

T = TypeVar("T")

_CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Path to carousel.yaml")


def _build_service(config_path: Optional[Path], **kwargs) -> CarouselService:
    config = load_config(config_path)
    return CarouselService(config, JsonStoryStore(Path(config.stories_dir)), **kwargs)


def _run(service: CarouselService, action: Callable[[], Awaitable[T]]) -> T:
    """Run an async service call and release the renderer afterwards."""

    async def _wrapped() -> T:
        try:
            return await action()
        finally:
            await service.close()

    return asyncio.run(_wrapped())


def list_stories(
    config: Optional[Path] = _CONFIG_OPTION,
) -> None:
    """List stored stories and whether they were shared."""
    service = _build_service(config)
    store = service.story_store
    stories = [story for story in (store.get_story(i) for i in store.list_stories()) if story is not None]
    show_stories_table(console, stories)


def preview(
    story_id: str = typer.Argument(..., help="Story ID"),
    config: Optional[Path] = _CONFIG_OPTION,
) -> None:
    """Show the planned slides and caption without rendering."""
    service = _build_service(config)
    try:
        story = service.load_story(story_id)
    except StoryNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(1)
    show_carousel_preview(console, story, service.prepare(story_id))


def render(
    story_id: str = typer.Argument(..., help="Story ID"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Directory to write slide images"),
    force: bool = typer.Option(False, "--force", "-f", help="Ignore cached images"),
    config: Optional[Path] = _CONFIG_OPTION,
) -> None:
    """Render a story's slides."""
    service = _build_service(config)
    try:
        images = _run(service, lambda: service.generate(story_id, force=force))
    except CarouselError as e:
        print_error(str(e))
        raise typer.Exit(1)

    written: list[Path] = []
    if output is not None:
        output.mkdir(parents=True, exist_ok=True)
        for image in images.images:
            extension = "jpg" if image.format == "jpeg" else image.format
            path = output / f"slide-{image.ordinal:02d}.{extension}"
            path.write_bytes(image.data)
            written.append(path)

    show_render_result(console, images, written)


def share(
    story_id: str = typer.Argument(..., help="Story ID"),
    config: Optional[Path] = _CONFIG_OPTION,
) -> None:
    """Render and publish a story's carousel to Instagram (once)."""

    async def _on_progress(progress: InstagramProgress) -> None:
        show_publish_progress(console, progress)

    service = _build_service(config, progress_callback=_on_progress)
    try:
        result = _run(service, lambda: service.share(story_id))
    except StoryNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(1)
    except ValueError as e:
        # Missing credentials
        print_error(str(e))
        raise typer.Exit(1)

    show_share_result(console, story_id, result)
    if not result.success:
        raise typer.Exit(1)


def status(
    story_id: str = typer.Argument(..., help="Story ID"),
    config: Optional[Path] = _CONFIG_OPTION,
) -> None:
    """Show a story's share status."""
    service = _build_service(config)
    try:
        story = service.load_story(story_id)
    except StoryNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(1)
    show_story_status(console, story)


def health(
    render_check: bool = typer.Option(False, "--render-check", help="Render a test image with the browser"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw report as JSON"),
    config: Optional[Path] = _CONFIG_OPTION,
) -> None:
    """Show error counters, health verdict and cache statistics."""
    service = _build_service(config)

    renderer_health = None
    if render_check:
        from ..rendering.renderer import PlaywrightRenderer

        async def _check_renderer() -> dict:
            async with PlaywrightRenderer(headless=service.config.render.headless) as renderer:
                return await renderer.health_check()

        try:
            renderer_health = asyncio.run(_check_renderer())
        except CarouselError as e:
            renderer_health = {"healthy": False, "message": str(e)}

    report = service.health_report()
    if as_json:
        if renderer_health is not None:
            report["renderer"] = renderer_health
        console.print_json(json.dumps(report, default=str))
    else:
        show_health_report(console, report, renderer_health)

    healthy = report["health"]["healthy"] and (renderer_health is None or renderer_health["healthy"])
    if not healthy:
        raise typer.Exit(1)


def cache_cleanup(
    clear: bool = typer.Option(False, "--clear", help="Remove every cached render, not just expired ones"),
    config: Optional[Path] = _CONFIG_OPTION,
) -> None:
    """Remove expired entries from the on-disk render cache."""
    service = _build_service(config)
    if clear:
        service.render_cache.clear()
        print_success("Render cache cleared")
        return
    show_cleanup_result(console, service.cleanup())
