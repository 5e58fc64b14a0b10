"""Display functions for carousel commands - pure functions for Rich output."""

from __future__ import annotations

from pathlib import Path
from typing import List

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..constants import ShareOutcome
from ..content.models import CarouselRecord, Story
from ..instagram.models import InstagramProgress
from ..pipeline.publisher import ShareResult
from ..rendering.models import PreGeneratedImageSet


def show_carousel_preview(console: Console, story: Story, record: CarouselRecord) -> None:
    """Display planned slides and caption."""
    analysis = record.analysis
    console.print(Panel(
        f"[bold]{story.title}[/bold]\n"
        f"Theme: [cyan]{analysis.visual_theme}[/cyan]  "
        f"Mood: [yellow]{analysis.mood}[/yellow]  "
        f"Genre: [magenta]{analysis.genre}[/magenta]\n"
        f"Themes: {', '.join(analysis.themes) or '-'}",
        title=f"Story {story.id}",
    ))

    table = Table(title=f"Slides ({record.slide_count})")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Kind", style="white")
    table.add_column("Description", style="dim")
    for slide in record.slides:
        table.add_row(str(slide.ordinal), slide.kind.value, slide.description)
    console.print(table)

    console.print(Panel(record.caption, title="Caption", border_style="dim"))


def show_render_result(
    console: Console,
    images: PreGeneratedImageSet,
    written: List[Path],
) -> None:
    """Display rendered images and where they were written."""
    table = Table(title=f"Rendered {len(images.images)} slide(s)")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Format", style="white")
    table.add_column("Size", justify="right")
    table.add_column("Fallback")
    for image in images.images:
        table.add_row(
            str(image.ordinal),
            image.format,
            f"{len(image.data) / 1024:.1f} KB",
            "[yellow]yes[/yellow]" if image.is_fallback else "[green]no[/green]",
        )
    console.print(table)

    if written:
        console.print(f"[dim]Written to {written[0].parent}[/dim]")
    if images.fallback_count:
        console.print(f"[yellow]{images.fallback_count} slide(s) used a fallback image[/yellow]")


def show_publish_progress(console: Console, progress: InstagramProgress) -> None:
    """One line per publish step."""
    console.print(f"[dim]{progress.progress_percent:5.1f}%[/dim] {progress.current_step}")


def show_share_result(console: Console, story_id: str, result: ShareResult) -> None:
    """Display share outcome."""
    if result.status == ShareOutcome.ALREADY_SHARED:
        console.print(Panel(
            f"[yellow]Story {story_id} was already shared[/yellow]\n\n"
            f"Post ID: {result.post_id}\n"
            f"Permalink: {result.permalink or '-'}",
            title="Share",
            border_style="yellow",
        ))
    elif result.success:
        persisted = "" if result.persisted else "\n[red]Share status could not be saved[/red]"
        console.print(Panel(
            f"[bold green]Published {result.slide_count} slide(s)[/bold green]\n\n"
            f"Post ID: [cyan]{result.post_id}[/cyan]\n"
            f"Permalink: {result.permalink or '-'}{persisted}",
            title="Share Complete",
            border_style="green",
        ))
    else:
        hint = "Retry later." if result.retryable else "Fix the problem before retrying."
        console.print(Panel(
            f"[red]{result.error}[/red]\n\n[dim]{hint}[/dim]",
            title=f"Share {result.status.value.replace('_', ' ').title()}",
            border_style="red",
        ))


def show_story_status(console: Console, story: Story) -> None:
    """Display a story's persisted share status."""
    status = story.share_status
    if status.shared:
        shared_at = status.shared_at.strftime("%Y-%m-%d %H:%M") if status.shared_at else "-"
        body = (
            f"[bold green]Shared[/bold green]\n\n"
            f"Post ID: [cyan]{status.post_id}[/cyan]\n"
            f"Shared at: {shared_at}\n"
            f"Slides: {status.slide_count}\n"
            f"Permalink: {status.permalink or '-'}"
        )
    else:
        body = "[yellow]Not shared[/yellow]"
    original = "yes" if story.has_original else "no"
    console.print(Panel(
        f"[bold]{story.title}[/bold]\n[dim]Original image: {original}[/dim]\n\n{body}",
        title=f"Story {story.id}",
    ))


def show_stories_table(console: Console, stories: List[Story]) -> None:
    """Display table of stored stories."""
    if not stories:
        console.print("[yellow]No stories found.[/yellow]")
        return

    table = Table(title="Stories")
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="white")
    table.add_column("Year", justify="right")
    table.add_column("Shared")
    for story in stories:
        table.add_row(
            story.id,
            story.title[:50] + ("..." if len(story.title) > 50 else ""),
            str(story.year or "-"),
            "[green]yes[/green]" if story.share_status.shared else "[dim]no[/dim]",
        )
    console.print(table)


def show_health_report(console: Console, report: dict, renderer: dict | None = None) -> None:
    """Display health status, error counters and cache stats."""
    health = report["health"]
    style = "green" if health["healthy"] else "red"
    lines = [
        f"[bold {style}]{health['message']}[/bold {style}]",
        f"Error rate: {health['error_rate']:.2f}/min",
    ]
    if renderer is not None:
        renderer_style = "green" if renderer["healthy"] else "red"
        lines.append(f"Renderer: [{renderer_style}]{renderer['message']}[/{renderer_style}]")
    console.print(Panel("\n".join(lines), title="Health", border_style=style))

    metrics = report["metrics"]
    table = Table(title="Errors")
    table.add_column("Type", style="cyan")
    table.add_column("Count", justify="right")
    for key in ("render_errors", "cache_errors", "publish_api_errors", "unknown_errors", "total_errors"):
        table.add_row(key.replace("_errors", ""), str(metrics[key]))
    console.print(table)

    cache = report["cache"]
    console.print(
        f"[dim]Render cache: {cache['memory_entries']}/{cache['max_size']} entries, "
        f"hit rate {cache['hit_rate']:.0%}[/dim]"
    )


def show_cleanup_result(console: Console, result: dict) -> None:
    """Display cache cleanup counts."""
    render = result.get("render_cache", {})
    console.print(Panel(
        f"Carousel metadata: {result.get('carousel_metadata', 0)}\n"
        f"Pre-generated images: {result.get('pre_generated_images', 0)}\n"
        f"Render cache (memory): {render.get('removed_memory', 0)}\n"
        f"Render cache (disk): {render.get('removed_disk', 0)}",
        title="Expired Entries Removed",
        border_style="green",
    ))
