"""Image uploader for Instagram posting using Cloudinary."""

from __future__ import annotations

import asyncio
import io
import logging
import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config import InstagramSettings
from ..content.models import Story
from ..constants import PublishErrorCategory
from ..monitoring.errors import PublishApiError
from ..rendering.models import PreGeneratedImageSet
from .media import ordered_slides

_api_logger = logging.getLogger("instagram_api")


class CloudinaryUploader:
    """Upload slide images to Cloudinary to get public URLs for Instagram API.

    Instagram Graph API requires images to be at publicly accessible URLs.
    """

    def __init__(self, settings: InstagramSettings, folder: str = "story-carousel"):
        """Initialize Cloudinary uploader.

        Args:
            settings: Credentials with Cloudinary fields set.
            folder: Base Cloudinary folder to organize uploads.
        """
        self.folder = folder
        # story id -> public ids still on Cloudinary
        self._uploaded: dict[str, list[str]] = {}

        cloudinary.config(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            secure=True,
        )

    @retry(
        retry=retry_if_exception_type(cloudinary.exceptions.Error),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def upload_image(self, data: bytes, story_id: str, name: str) -> str:
        """Upload one image. Returns its public URL."""
        scoped_folder = f"{self.folder}/{story_id}"
        result = cloudinary.uploader.upload(
            io.BytesIO(data),
            folder=scoped_folder,
            resource_type="image",
            overwrite=True,
            public_id=name,
        )
        self._uploaded.setdefault(story_id, []).append(result["public_id"])
        return result["secure_url"]

    async def upload_batch(self, items: list[tuple[str, bytes]], story_id: str) -> list[str]:
        """Upload images sequentially, in order.

        Args:
            items: (name, bytes) pairs.
            story_id: Used as the sub-folder.

        Returns:
            Public URLs in the same order as input.
        """
        total = len(items)
        urls: list[str] = []
        loop = asyncio.get_running_loop()
        for name, data in items:
            try:
                url = await loop.run_in_executor(
                    None,
                    lambda d=data, n=name: self.upload_image(d, story_id, n),
                )
            except cloudinary.exceptions.Error as e:
                _api_logger.error(f"STORY:{story_id} | UPLOAD FAILED | {name} | {e}")
                raise PublishApiError(
                    f"Cloudinary upload failed for {name}: {e}",
                    category=PublishErrorCategory.SERVER_ERROR,
                ) from e
            urls.append(url)

        _api_logger.info(f"STORY:{story_id} | UPLOADED | images:{total}")
        return urls

    def pending(self, story_id: str | None = None) -> int:
        """Number of uploads not yet deleted, for one story or all."""
        if story_id is not None:
            return len(self._uploaded.get(story_id, []))
        return sum(len(ids) for ids in self._uploaded.values())

    def cleanup(self, story_id: str | None = None) -> int:
        """Delete uploaded files from Cloudinary.

        Args:
            story_id: Only delete this story's uploads. All stories when None.

        Returns:
            Number of files deleted
        """
        story_ids = [story_id] if story_id is not None else list(self._uploaded)
        deleted = 0
        for sid in story_ids:
            for public_id in self._uploaded.pop(sid, []):
                try:
                    cloudinary.uploader.destroy(public_id)
                    deleted += 1
                except cloudinary.exceptions.Error as e:
                    _api_logger.warning(f"Cloudinary cleanup failed for {public_id}: {e}")
        if deleted:
            _api_logger.info(f"CLOUDINARY CLEANUP | deleted:{deleted}")
        return deleted


class CloudinaryResolver:
    """MediaResolver that uploads rendered slides to Cloudinary.

    Uploads only need to live until Instagram has fetched them, so the
    publisher calls `release()` once the publish attempt is over.
    """

    def __init__(self, uploader: CloudinaryUploader):
        self.uploader = uploader

    async def resolve(self, story: Story, images: PreGeneratedImageSet) -> list[str]:
        """Original image first (URL or uploaded bytes), then each rendered slide."""
        refs: list[str] = []
        items: list[tuple[str, bytes]] = []
        if story.existing_image_url:
            refs.append(story.existing_image_url)
        elif story.original_image:
            items.append(("slide-00-original", story.original_image))

        for image in ordered_slides(images):
            items.append((f"slide-{image.ordinal:02d}", image.data))

        refs.extend(await self.uploader.upload_batch(items, story.id))
        return refs

    async def release(self, story_id: str) -> int:
        """Delete the story's uploads."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.uploader.cleanup, story_id)
