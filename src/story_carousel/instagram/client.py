"""Instagram Graph API client for publishing carousel posts."""

from __future__ import annotations

import asyncio
import logging
import re
import unicodedata
from typing import Awaitable, Callable

import httpx

from ..config import InstagramSettings
from ..constants import INSTAGRAM_CAPTION_MAX_LENGTH, PublishErrorCategory
from ..monitoring.errors import PublishApiError, category_for_status
from .models import InstagramPostStatus, InstagramProgress, PublishReceipt

_api_logger = logging.getLogger("instagram_api")

_EMOJI_PATTERN = re.compile(
    "["
    "\U0001F300-\U0001F9FF"  # Misc Symbols, Emoticons, etc.
    "\U0001FA00-\U0001FAFF"  # Extended-A symbols
    "\U00002702-\U000027B0"  # Dingbats
    "\U0000FE00-\U0000FE0F"  # Variation selectors
    "\U0001F1E0-\U0001F1FF"  # Flags (regional indicators)
    "\U00002600-\U000026FF"  # Misc symbols
    "\U00002300-\U000023FF"  # Misc technical
    "\U0000200D"             # Zero-width joiner
    "]+",
    flags=re.UNICODE,
)

_TYPOGRAPHY = str.maketrans({
    "\u2018": "'",   # Left single quote
    "\u2019": "'",   # Right single quote
    "\u201c": '"',   # Left double quote
    "\u201d": '"',   # Right double quote
    "\u2014": "-",   # Em dash
    "\u2013": "-",   # En dash
    "\u2026": "...",  # Ellipsis
    "\u00a0": " ",   # Non-breaking space
    "\u200b": None,  # Zero-width space
    "\u200c": None,  # Zero-width non-joiner
    "\ufeff": None,  # BOM
    "\u00ad": None,  # Soft hyphen
    "\u2028": "\n",  # Line separator
    "\u2029": "\n",  # Paragraph separator
})


def sanitize_caption(caption: str) -> str:
    """Strip characters the Graph API tends to reject.

    Removes emoji, zero-width and control characters, normalizes to NFC
    and replaces typographic quotes and dashes with ASCII ones. Runs of
    spaces collapse to one and blank lines to at most one.
    """
    if not caption:
        return ""

    caption = _EMOJI_PATTERN.sub("", caption)
    caption = unicodedata.normalize("NFC", caption).translate(_TYPOGRAPHY)

    cleaned = []
    for char in caption:
        if char in "\n\r\t":
            cleaned.append(char)
        elif unicodedata.category(char) in ("Cc", "Cf", "So"):
            continue
        elif ord(char) > 0xFFFF:
            continue
        else:
            cleaned.append(char)
    caption = "".join(cleaned)

    caption = re.sub(r" {2,}", " ", caption)
    caption = re.sub(r"\n{3,}", "\n\n", caption)
    return caption.strip()


# Known Graph API error codes with retry guidance
INSTAGRAM_ERROR_CODES = {
    # Media processing errors (often transient)
    2207032: {
        "name": "MEDIA_UPLOAD_FAILED",
        "description": "Instagram failed to process the media upload",
        "category": PublishErrorCategory.SERVER_ERROR,
        "retry_delay": 30,
    },
    2207026: {
        "name": "MEDIA_NOT_READY",
        "description": "Media container is not ready yet",
        "category": PublishErrorCategory.SERVER_ERROR,
        "retry_delay": 10,
    },
    2207001: {
        "name": "MEDIA_TYPE_NOT_SUPPORTED",
        "description": "Unsupported media type",
        "category": PublishErrorCategory.CLIENT_ERROR,
    },
    2207003: {
        "name": "MEDIA_SIZE_ERROR",
        "description": "Media exceeds size limits",
        "category": PublishErrorCategory.CLIENT_ERROR,
    },
    2207050: {
        "name": "CAROUSEL_MIN_CHILDREN",
        "description": "Carousel needs at least 2 items",
        "category": PublishErrorCategory.CLIENT_ERROR,
    },
    2207051: {
        "name": "CAROUSEL_MAX_CHILDREN",
        "description": "Carousel exceeds 10 items",
        "category": PublishErrorCategory.CLIENT_ERROR,
    },
    # Rate limiting
    4: {
        "name": "RATE_LIMIT",
        "description": "Rate limit reached",
        "category": PublishErrorCategory.RATE_LIMITED,
        "retry_delay": 60,
    },
    9: {
        "name": "APP_RATE_LIMIT",
        "description": "Application request limit reached",
        "category": PublishErrorCategory.RATE_LIMITED,
        "retry_delay": 300,
    },
    17: {
        "name": "USER_RATE_LIMIT",
        "description": "User request limit reached",
        "category": PublishErrorCategory.RATE_LIMITED,
        "retry_delay": 120,
    },
    # Auth errors
    190: {
        "name": "ACCESS_TOKEN_EXPIRED",
        "description": "Access token expired",
        "category": PublishErrorCategory.AUTH,
    },
    10: {
        "name": "PERMISSION_DENIED",
        "description": "Permission denied",
        "category": PublishErrorCategory.FORBIDDEN,
    },
}

# Subcodes take precedence over the main error code when present
INSTAGRAM_ERROR_SUBCODES = {
    2207069: {
        "name": "DAILY_POSTING_LIMIT",
        "description": "Content Publishing API daily limit exceeded (resets at midnight UTC)",
        "category": PublishErrorCategory.RATE_LIMITED,
        "retry_delay": 3600,
    },
}


def get_error_info(
    error_code: int | None,
    error_subcode: int | None = None,
    status_code: int | None = None,
) -> dict:
    """Get detailed error information for a Graph API error.

    Args:
        error_code: Main error code from the API response.
        error_subcode: Sub-error code (takes precedence if known).
        status_code: HTTP status, used when the code is unknown.

    Returns:
        Dict with name, description, category and optional retry_delay.
    """
    if error_subcode is not None and error_subcode in INSTAGRAM_ERROR_SUBCODES:
        return INSTAGRAM_ERROR_SUBCODES[error_subcode]
    if error_code is not None and error_code in INSTAGRAM_ERROR_CODES:
        return INSTAGRAM_ERROR_CODES[error_code]

    name = f"ERROR_{error_code}" if error_code is not None else "UNKNOWN"
    return {
        "name": name,
        "description": f"Unknown error code: {error_code}" if error_code is not None else "Unknown error",
        "category": category_for_status(status_code),
    }


class InstagramAPIError(PublishApiError):
    """Graph API error with Instagram error codes."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: int | None = None,
        error_subcode: int | None = None,
        user_title: str | None = None,
    ):
        info = get_error_info(error_code, error_subcode, status_code)
        super().__init__(message, status_code=status_code, category=info["category"])
        self.error_code = error_code
        self.error_subcode = error_subcode
        self.error_name = info["name"]
        self.retry_delay = info.get("retry_delay")
        self.user_title = user_title


class InstagramClient:
    """Instagram Graph API client for publishing carousel posts.

    Implements the container-based publishing workflow:
    1. Create media container for each image (requires public URL)
    2. Create carousel container referencing all child containers
    3. Publish the carousel

    API Reference:
    https://developers.facebook.com/docs/instagram-platform/instagram-graph-api/content-publishing
    """

    def __init__(
        self,
        settings: InstagramSettings,
        progress_callback: Callable[[InstagramProgress], Awaitable[None]] | None = None,
        poll_interval: float = 5.0,
        max_wait_seconds: float = 300.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize Instagram client.

        Args:
            settings: Instagram credentials.
            progress_callback: Async callback for progress updates.
            poll_interval: Seconds between container status checks.
            max_wait_seconds: Give up waiting for a container after this long.
            transport: Optional httpx transport (tests use MockTransport).
        """
        self.settings = settings
        self.progress_callback = progress_callback
        self.poll_interval = poll_interval
        self.max_wait_seconds = max_wait_seconds
        self.base_url = f"https://graph.facebook.com/{settings.instagram_api_version}"
        self._transport = transport
        self._progress = InstagramProgress()
        self._api_call_count = 0

    async def _report_progress(
        self,
        status: InstagramPostStatus,
        step: str,
        percent: float = 0.0,
    ) -> None:
        """Update and report progress."""
        self._progress.status = status
        self._progress.current_step = step
        self._progress.progress_percent = percent
        if self.progress_callback:
            await self.progress_callback(self._progress)

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: dict | None = None,
    ) -> dict:
        """Make a request to the Instagram Graph API.

        Raises:
            InstagramAPIError: If the API returns an error or is unreachable.
        """
        self._api_call_count += 1
        url = f"{self.base_url}/{endpoint}"
        params = dict(params or {})
        log_params = {k: (v[:80] if isinstance(v, str) else v) for k, v in params.items()}
        params["access_token"] = self.settings.instagram_access_token

        _api_logger.info(f"API CALL #{self._api_call_count} | {method} {endpoint} | params: {log_params}")

        try:
            async with httpx.AsyncClient(timeout=60.0, transport=self._transport) as client:
                response = await client.request(method.upper(), url, params=params)
        except httpx.HTTPError as e:
            _api_logger.error(f"API CALL #{self._api_call_count} | TRANSPORT ERROR: {e}")
            raise InstagramAPIError(f"Request failed: {e}") from e

        try:
            result = response.json()
        except ValueError:
            result = {}

        if "error" in result or response.status_code >= 400:
            error = result.get("error", {})
            _api_logger.error(f"API CALL #{self._api_call_count} | HTTP {response.status_code} | ERROR: {error}")
            raise InstagramAPIError(
                error.get("message", f"HTTP {response.status_code}"),
                status_code=response.status_code,
                error_code=error.get("code"),
                error_subcode=error.get("error_subcode"),
                user_title=error.get("error_user_title"),
            )

        _api_logger.info(f"API CALL #{self._api_call_count} | SUCCESS: {list(result.keys())}")
        return result

    async def create_image_container(self, image_url: str) -> str:
        """Create a carousel item container for a single image.

        Returns:
            Container ID (creation_id)
        """
        endpoint = f"{self.settings.instagram_user_id}/media"
        params = {"image_url": image_url, "is_carousel_item": "true"}
        result = await self._make_request("POST", endpoint, params=params)
        return result["id"]

    async def create_carousel_container(self, children_ids: list[str], caption: str) -> str:
        """Create a carousel container from child containers."""
        endpoint = f"{self.settings.instagram_user_id}/media"
        params = {
            "media_type": "CAROUSEL",
            "children": ",".join(children_ids),
            "caption": sanitize_caption(caption)[:INSTAGRAM_CAPTION_MAX_LENGTH],
        }
        result = await self._make_request("POST", endpoint, params=params)
        return result["id"]

    async def check_container_status(self, container_id: str) -> dict:
        """Fetch status_code and status for a container."""
        return await self._make_request("GET", container_id, params={"fields": "status_code,status"})

    async def wait_for_container(self, container_id: str) -> None:
        """Poll until a container is ready for publishing.

        Raises:
            InstagramAPIError: If processing failed, expired or timed out.
        """
        elapsed = 0.0
        while elapsed <= self.max_wait_seconds:
            status = await self.check_container_status(container_id)
            status_code = status.get("status_code", "").upper()

            if status_code == "FINISHED":
                return
            if status_code == "ERROR":
                status_msg = status.get("status", "Unknown error")
                match = re.search(r"error code (\d+)", status_msg, re.IGNORECASE)
                raise InstagramAPIError(
                    f"Container processing failed: {status_msg}",
                    error_code=int(match.group(1)) if match else None,
                )
            if status_code == "EXPIRED":
                raise InstagramAPIError(
                    "Container expired before publishing",
                    error_code=2207026,
                )

            await asyncio.sleep(self.poll_interval)
            elapsed += self.poll_interval

        raise InstagramAPIError(f"Container {container_id} timed out waiting to be ready", error_code=2207026)

    async def publish_container(self, creation_id: str) -> str:
        """Publish a container. Returns the media ID."""
        endpoint = f"{self.settings.instagram_user_id}/media_publish"
        result = await self._make_request("POST", endpoint, params={"creation_id": creation_id})
        return result["id"]

    async def get_media_permalink(self, media_id: str) -> str | None:
        """Permalink for a published media, None if unavailable."""
        try:
            result = await self._make_request("GET", media_id, params={"fields": "permalink"})
        except InstagramAPIError as e:
            _api_logger.warning(f"Permalink lookup failed for {media_id}: {e}")
            return None
        return result.get("permalink")

    async def publish(self, media_refs: list[str], caption: str) -> PublishReceipt:
        """Publish a carousel of public image URLs.

        Raises:
            InstagramAPIError: On any API failure. Nothing is retried here;
                the caller decides based on `retryable`.
        """
        self._progress = InstagramProgress(total_images=len(media_refs))
        _api_logger.info(f"=== PUBLISH START === user:{self.settings.instagram_user_id} | images:{len(media_refs)}")

        await self._report_progress(InstagramPostStatus.CREATING_CONTAINERS, "Creating image containers...", 10.0)
        container_ids = []
        for i, url in enumerate(media_refs):
            container_ids.append(await self.create_image_container(url))
            self._progress.containers_created = i + 1
            self._progress.container_ids = container_ids
            await self._report_progress(
                InstagramPostStatus.CREATING_CONTAINERS,
                f"Created container {i + 1}/{len(media_refs)}",
                10.0 + (30.0 * (i + 1) / len(media_refs)),
            )

        await self._report_progress(InstagramPostStatus.CREATING_CONTAINERS, "Waiting for containers...", 45.0)
        for container_id in container_ids:
            await self.wait_for_container(container_id)

        carousel_id = await self.create_carousel_container(container_ids, caption)
        self._progress.carousel_container_id = carousel_id
        await self._report_progress(InstagramPostStatus.CREATING_CONTAINERS, "Waiting for carousel...", 70.0)
        await self.wait_for_container(carousel_id)

        await self._report_progress(InstagramPostStatus.PUBLISHING, "Publishing to Instagram...", 85.0)
        media_id = await self.publish_container(carousel_id)
        permalink = await self.get_media_permalink(media_id)

        await self._report_progress(InstagramPostStatus.PUBLISHED, "Published successfully!", 100.0)
        _api_logger.info(f"=== PUBLISH COMPLETE === media:{media_id} | API calls: {self._api_call_count}")
        return PublishReceipt(post_id=media_id, permalink=permalink)
