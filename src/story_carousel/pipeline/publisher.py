"""Publish-once carousel sharing.

State machine per story:
  NOT_SHARED -> SHARING -> SHARED
                   |
                   v (publish failed)
               NOT_SHARED

A story whose persisted share status says `shared` is never sent to the
publish API again. The status is written only after the API confirms
the post, so a crash between the two leaves a window in which a repeat
publish is possible.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from ..constants import ErrorType, ShareOutcome, ShareState
from ..content.models import CarouselRecord, ShareStatus, Story
from ..instagram.models import PublishReceipt
from ..monitoring.errors import PublishApiError
from ..monitoring.monitor import ErrorMonitor
from ..rendering.models import PreGeneratedImageSet
from ..storage.story_store import StoryStore

_logger = logging.getLogger("carousel.pipeline")


class PublishApi(Protocol):
    """Social publish API. Raises PublishApiError on failure."""

    async def publish(self, media_refs: list[str], caption: str) -> PublishReceipt:
        ...


class MediaResolver(Protocol):
    """Turns a story's slides into references the publish API can fetch."""

    async def resolve(self, story: Story, images: PreGeneratedImageSet) -> list[str]:
        ...

    async def release(self, story_id: str) -> int:
        """Drop any hosted copies once the publish attempt is over."""
        ...


@dataclass
class ShareResult:
    """Outcome of a share request."""

    status: ShareOutcome
    post_id: str | None = None
    permalink: str | None = None
    slide_count: int = 0
    error: str | None = None
    retryable: bool = False
    persisted: bool = True

    @property
    def success(self) -> bool:
        return self.status in (ShareOutcome.SHARED, ShareOutcome.ALREADY_SHARED)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "post_id": self.post_id,
            "permalink": self.permalink,
            "slide_count": self.slide_count,
            "error": self.error,
            "retryable": self.retryable,
            "persisted": self.persisted,
        }


class CarouselPublisher:
    """Publish a rendered carousel at most once per story.

    Usage:
        publisher = CarouselPublisher(api, story_store, resolver, monitor)
        result = await publisher.publish(story, record, images)
    """

    def __init__(
        self,
        api: PublishApi,
        story_store: StoryStore,
        resolver: MediaResolver,
        monitor: ErrorMonitor | None = None,
    ):
        self.api = api
        self.story_store = story_store
        self.resolver = resolver
        self.monitor = monitor or ErrorMonitor()
        self._in_flight: set[str] = set()

    def get_state(self, story: Story) -> ShareState:
        """Current sharing state of a story."""
        if story.share_status.shared:
            return ShareState.SHARED
        if story.id in self._in_flight:
            return ShareState.SHARING
        return ShareState.NOT_SHARED

    async def publish(
        self,
        story: Story,
        record: CarouselRecord,
        images: PreGeneratedImageSet,
    ) -> ShareResult:
        """Publish a story's carousel.

        Returns:
            ShareResult. Publish API failures come back as FAILED with a
            retryable flag rather than raising.
        """
        if story.share_status.shared:
            _logger.info(f"STORY:{story.id} | SHARE SKIPPED | already shared as {story.share_status.post_id}")
            return ShareResult(
                status=ShareOutcome.ALREADY_SHARED,
                post_id=story.share_status.post_id,
                permalink=story.share_status.permalink,
                slide_count=story.share_status.slide_count,
            )

        if story.id in self._in_flight:
            _logger.warning(f"STORY:{story.id} | SHARE REJECTED | already in progress")
            return ShareResult(
                status=ShareOutcome.IN_PROGRESS,
                error="A share for this story is already in progress",
                retryable=True,
            )

        self._in_flight.add(story.id)
        try:
            return await self._publish(story, record, images)
        finally:
            self._in_flight.discard(story.id)

    async def _publish(
        self,
        story: Story,
        record: CarouselRecord,
        images: PreGeneratedImageSet,
    ) -> ShareResult:
        _logger.info(f"STORY:{story.id} | SHARE START | slides:{record.slide_count}")

        try:
            media_refs = await self.resolver.resolve(story, images)
            receipt = await self.api.publish(media_refs, record.caption)
        except PublishApiError as e:
            self.monitor.record_error(
                e,
                context={"story": story.id, "status": e.status_code, "category": e.category.value},
            )
            _logger.error(
                f"STORY:{story.id} | SHARE FAILED | {e.category.value} | retryable:{e.retryable} | {e}"
            )
            return ShareResult(
                status=ShareOutcome.FAILED,
                error=str(e),
                retryable=e.retryable,
            )
        finally:
            released = await self.resolver.release(story.id)
            if released:
                _logger.info(f"STORY:{story.id} | MEDIA RELEASED | files:{released}")

        status = ShareStatus(
            shared=True,
            post_id=receipt.post_id,
            shared_at=datetime.now(),
            slide_count=len(media_refs),
            permalink=receipt.permalink,
        )
        _logger.info(f"STORY:{story.id} | SHARED | post:{receipt.post_id} | slides:{len(media_refs)}")

        persisted = True
        try:
            self.story_store.update_share_status(story.id, status)
        except Exception as e:
            # Post is live but the store does not know it
            persisted = False
            _logger.error(
                f"STORY:{story.id} | PERSIST FAILED | post:{receipt.post_id} is live but unrecorded | {e}"
            )
            self.monitor.record_error(e, ErrorType.UNKNOWN, context={"story": story.id, "post": receipt.post_id})

        return ShareResult(
            status=ShareOutcome.SHARED,
            post_id=receipt.post_id,
            permalink=receipt.permalink,
            slide_count=len(media_refs),
            persisted=persisted,
        )
