"""Tests for the carousel CLI commands."""

import json

import pytest
from typer.testing import CliRunner

from story_carousel.cli import commands
from story_carousel.cli.app import app
from story_carousel.content.models import ShareStatus
from story_carousel.pipeline.service import CarouselService

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path, story_store):
    """carousel.yaml pointing at the sample story store."""
    path = tmp_path / "carousel.yaml"
    path.write_text(
        f"stories_dir: {tmp_path / 'stories'}\n"
        "batch:\n"
        "  batch_pause_seconds: 0\n",
        encoding="utf-8",
    )
    return path


class TestReadOnlyCommands:
    """Tests for commands that never render or publish."""

    def test_list(self, config_file):
        result = runner.invoke(app, ["list", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "story-1" in result.output
        assert "story-2" in result.output

    def test_list_empty(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text(f"stories_dir: {tmp_path / 'none'}\n", encoding="utf-8")

        result = runner.invoke(app, ["list", "-c", str(path)])

        assert result.exit_code == 0
        assert "No stories found" in result.output

    def test_preview(self, config_file):
        result = runner.invoke(app, ["preview", "story-1", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "Caption" in result.output
        assert "title" in result.output

    def test_status_not_shared(self, config_file):
        result = runner.invoke(app, ["status", "story-1", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "Not shared" in result.output

    def test_status_shared(self, config_file, story_store):
        story_store.update_share_status("story-1", ShareStatus(shared=True, post_id="p-77", slide_count=4))

        result = runner.invoke(app, ["status", "story-1", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "p-77" in result.output

    @pytest.mark.parametrize("command", ["preview", "status", "share"])
    def test_missing_story_exits_1(self, config_file, command):
        """Test that an unknown story id is reported, not raised."""
        result = runner.invoke(app, [command, "nope", "--config", str(config_file)])
        assert result.exit_code == 1
        assert "Story not found: nope" in result.output

    def test_health_json(self, config_file):
        result = runner.invoke(app, ["health", "--json", "--config", str(config_file)])

        assert result.exit_code == 0
        report = json.loads(result.output)
        assert report["health"]["healthy"] is True
        assert report["metrics"]["total_errors"] == 0

    def test_cache_cleanup(self, config_file):
        result = runner.invoke(app, ["cache-cleanup", "--config", str(config_file)])
        assert result.exit_code == 0

    def test_cache_clear(self, config_file):
        result = runner.invoke(app, ["cache-cleanup", "--clear", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "Render cache cleared" in result.output


class TestRenderAndShare:
    """Tests for commands that go through the renderer and publish API."""

    @pytest.fixture
    def service(self, config, story_store, fake_renderer, mock_publish_api, mock_resolver, monkeypatch):
        service = CarouselService(
            config,
            story_store,
            renderer=fake_renderer,
            api=mock_publish_api,
            resolver=mock_resolver,
        )
        monkeypatch.setattr(commands, "_build_service", lambda config_path, **kwargs: service)
        return service

    def test_render_writes_slides(self, service, tmp_path):
        output = tmp_path / "out"

        result = runner.invoke(app, ["render", "story-1", "--output", str(output)])

        assert result.exit_code == 0
        written = sorted(p.name for p in output.iterdir())
        assert written[0] == "slide-00.png"
        assert len(written) == len(service.store.get_images("story-1").images)

    def test_share_then_already_shared(self, service, mock_publish_api):
        first = runner.invoke(app, ["share", "story-1"])
        second = runner.invoke(app, ["share", "story-1"])

        assert first.exit_code == 0
        assert "post-123" in first.output
        assert second.exit_code == 0
        assert mock_publish_api.publish.await_count == 1

    def test_share_failure_exits_1(self, service, mock_publish_api):
        from story_carousel.monitoring.errors import PublishApiError

        mock_publish_api.publish.side_effect = PublishApiError("Too many calls", status_code=429)

        result = runner.invoke(app, ["share", "story-1"])

        assert result.exit_code == 1

    def test_share_passes_progress_callback(self, service, monkeypatch):
        """Test that share hands the service a callback for publish progress."""
        seen = {}

        def _build(config_path, **kwargs):
            seen.update(kwargs)
            return service

        monkeypatch.setattr(commands, "_build_service", _build)

        result = runner.invoke(app, ["share", "story-1"])

        assert result.exit_code == 0
        assert callable(seen["progress_callback"])


class TestPublishProgressDisplay:

    def test_progress_line(self):
        from rich.console import Console

        from story_carousel.cli.display import show_publish_progress
        from story_carousel.instagram.models import InstagramPostStatus, InstagramProgress

        console = Console(record=True, width=80)
        progress = InstagramProgress(
            status=InstagramPostStatus.PUBLISHING,
            current_step="Publishing to Instagram...",
            progress_percent=85.0,
        )

        show_publish_progress(console, progress)

        assert "85.0% Publishing to Instagram..." in console.export_text()
