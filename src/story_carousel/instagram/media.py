"""Media references for the publish API.

The Graph API only accepts public image URLs. Two ways to get them:
- ServedUrlResolver: the service serves slides itself under a public base URL
- CloudinaryResolver: slides are uploaded to Cloudinary (see uploader.py)
"""

from __future__ import annotations

from ..content.models import Story
from ..monitoring.errors import PublishApiError
from ..rendering.models import PreGeneratedImageSet, RenderedSlide


def ordered_slides(images: PreGeneratedImageSet) -> list[RenderedSlide]:
    """Rendered slides in ordinal order."""
    return sorted(images.images, key=lambda image: image.ordinal)


class ServedUrlResolver:
    """Build URLs of the form `{base}/images/{story_id}/{ordinal}`."""

    def __init__(self, public_base_url: str):
        if not public_base_url:
            raise ValueError("public_base_url is required to serve carousel images")
        self.public_base_url = public_base_url.rstrip("/")

    def image_url(self, story_id: str, ordinal: int) -> str:
        return f"{self.public_base_url}/images/{story_id}/{ordinal}"

    async def resolve(self, story: Story, images: PreGeneratedImageSet) -> list[str]:
        """Original image URL first (when present), then each rendered slide."""
        refs: list[str] = []
        if story.existing_image_url:
            refs.append(story.existing_image_url)
        elif story.original_image:
            refs.append(self.image_url(story.id, 0))
        refs.extend(self.image_url(story.id, image.ordinal) for image in ordered_slides(images))
        if not refs:
            raise PublishApiError(f"No media to publish for story {story.id}", status_code=400)
        return refs

    async def release(self, story_id: str) -> int:
        """Nothing to delete, slides are served from the carousel store."""
        return 0
