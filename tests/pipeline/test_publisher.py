"""Tests for publish-once sharing."""

import asyncio
from unittest.mock import MagicMock

import pytest

from story_carousel.constants import PublishErrorCategory, ShareOutcome, ShareState
from story_carousel.content.models import CarouselRecord, ShareStatus
from story_carousel.instagram.models import PublishReceipt
from story_carousel.monitoring.errors import PublishApiError
from story_carousel.monitoring.monitor import ErrorMonitor
from story_carousel.pipeline.publisher import CarouselPublisher
from story_carousel.rendering.models import PreGeneratedImageSet, RenderedSlide


@pytest.fixture
def images() -> PreGeneratedImageSet:
    return PreGeneratedImageSet(
        story_id="story-1",
        images=[RenderedSlide(ordinal=i, data=b"img", format="png") for i in range(3)],
    )


@pytest.fixture
def record() -> CarouselRecord:
    return CarouselRecord(story_id="story-1", caption="A caption")


@pytest.fixture
def publisher(mock_publish_api, story_store, mock_resolver) -> CarouselPublisher:
    return CarouselPublisher(mock_publish_api, story_store, mock_resolver, ErrorMonitor())


class TestCarouselPublisher:
    """Tests for CarouselPublisher.publish."""

    @pytest.mark.asyncio
    async def test_publish_persists_status(self, publisher, story_store, story, record, images, mock_publish_api):
        """Test that a successful publish is written to the story store."""
        result = await publisher.publish(story, record, images)

        assert result.status == ShareOutcome.SHARED
        assert result.post_id == "post-123"
        assert result.slide_count == 3
        assert result.persisted
        mock_publish_api.publish.assert_awaited_once_with(
            [f"https://cdn.example.com/story-1/{i}" for i in range(3)],
            "A caption",
        )

        saved = story_store.get_story("story-1").share_status
        assert saved.shared
        assert saved.post_id == "post-123"
        assert saved.permalink == "https://www.instagram.com/p/abc123/"
        assert saved.shared_at is not None

    @pytest.mark.asyncio
    async def test_already_shared_never_calls_api(self, publisher, story, record, images, mock_publish_api):
        """Test that a shared story returns its existing post without an API call."""
        shared = story.model_copy(update={
            "share_status": ShareStatus(shared=True, post_id="old-post", slide_count=4),
        })

        result = await publisher.publish(shared, record, images)

        assert result.status == ShareOutcome.ALREADY_SHARED
        assert result.post_id == "old-post"
        assert result.success
        mock_publish_api.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_second_share_after_success_is_idempotent(
        self, publisher, story_store, record, images, mock_publish_api
    ):
        """Test that sharing twice publishes once."""
        await publisher.publish(story_store.get_story("story-1"), record, images)
        second = await publisher.publish(story_store.get_story("story-1"), record, images)

        assert second.status == ShareOutcome.ALREADY_SHARED
        assert second.post_id == "post-123"
        assert mock_publish_api.publish.await_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_share_rejected(self, publisher, story, record, images, mock_publish_api):
        """Test that a second share while one is in flight does not publish."""
        release = asyncio.Event()

        async def _slow_publish(media_refs, caption):
            await release.wait()
            return PublishReceipt(post_id="post-123")

        mock_publish_api.publish.side_effect = _slow_publish

        first = asyncio.create_task(publisher.publish(story, record, images))
        await asyncio.sleep(0)
        assert publisher.get_state(story) == ShareState.SHARING

        second = await publisher.publish(story, record, images)
        release.set()
        first_result = await first

        assert second.status == ShareOutcome.IN_PROGRESS
        assert second.retryable
        assert first_result.status == ShareOutcome.SHARED
        assert mock_publish_api.publish.await_count == 1
        assert publisher.get_state(story) == ShareState.NOT_SHARED

    @pytest.mark.asyncio
    async def test_rate_limited_failure_is_retryable(self, publisher, story_store, story, record, images, mock_publish_api):
        """Test that a rate limit failure is reported as retryable and not persisted."""
        mock_publish_api.publish.side_effect = PublishApiError("slow down", status_code=429)

        result = await publisher.publish(story, record, images)

        assert result.status == ShareOutcome.FAILED
        assert result.retryable
        assert not result.success
        assert not story_store.get_story("story-1").share_status.shared
        assert publisher.monitor.get_metrics().publish_api_errors == 1

    @pytest.mark.asyncio
    async def test_auth_failure_not_retryable(self, publisher, story, record, images, mock_publish_api):
        mock_publish_api.publish.side_effect = PublishApiError("bad token", status_code=401)

        result = await publisher.publish(story, record, images)

        assert result.status == ShareOutcome.FAILED
        assert not result.retryable
        assert "bad token" in result.error

    @pytest.mark.asyncio
    async def test_failure_allows_retry(self, publisher, story, record, images, mock_publish_api):
        """Test that a failed share leaves the story shareable."""
        mock_publish_api.publish.side_effect = [
            PublishApiError("server", category=PublishErrorCategory.SERVER_ERROR),
            PublishReceipt(post_id="post-9"),
        ]

        first = await publisher.publish(story, record, images)
        second = await publisher.publish(story, record, images)

        assert first.status == ShareOutcome.FAILED
        assert first.retryable
        assert second.status == ShareOutcome.SHARED
        assert second.post_id == "post-9"

    @pytest.mark.asyncio
    async def test_persistence_failure_reports_unsaved_success(
        self, mock_publish_api, mock_resolver, story, record, images
    ):
        """Test that a live post whose status cannot be saved is still reported as shared."""
        broken_store = MagicMock()
        broken_store.update_share_status.side_effect = OSError("disk full")
        monitor = ErrorMonitor()
        publisher = CarouselPublisher(mock_publish_api, broken_store, mock_resolver, monitor)

        result = await publisher.publish(story, record, images)

        assert result.status == ShareOutcome.SHARED
        assert result.post_id == "post-123"
        assert not result.persisted
        assert monitor.get_metrics().unknown_errors == 1

    @pytest.mark.asyncio
    async def test_resolver_failure_is_failed_share(self, publisher, story, record, images, mock_resolver):
        mock_resolver.resolve.side_effect = PublishApiError("no media", status_code=400)

        result = await publisher.publish(story, record, images)

        assert result.status == ShareOutcome.FAILED
        assert not result.retryable

    @pytest.mark.asyncio
    async def test_media_released_after_publish(self, publisher, story, record, images, mock_resolver):
        """Test that hosted media is released once the post is live."""
        await publisher.publish(story, record, images)
        mock_resolver.release.assert_awaited_once_with("story-1")

    @pytest.mark.asyncio
    async def test_media_released_after_failure(self, publisher, story, record, images, mock_publish_api, mock_resolver):
        mock_publish_api.publish.side_effect = PublishApiError("server", status_code=500)

        await publisher.publish(story, record, images)

        mock_resolver.release.assert_awaited_once_with("story-1")

    @pytest.mark.asyncio
    async def test_already_shared_releases_nothing(self, publisher, story, record, images, mock_resolver):
        shared = story.model_copy(update={"share_status": ShareStatus(shared=True, post_id="old")})

        await publisher.publish(shared, record, images)

        mock_resolver.resolve.assert_not_called()
        mock_resolver.release.assert_not_called()
