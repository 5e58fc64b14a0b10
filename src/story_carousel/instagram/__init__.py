"""Instagram publishing: Graph API client and media resolvers."""

from .client import InstagramAPIError, InstagramClient, get_error_info, sanitize_caption
from .media import ServedUrlResolver
from .models import InstagramPostStatus, InstagramProgress, PublishReceipt

__all__ = [
    "InstagramAPIError",
    "InstagramClient",
    "InstagramPostStatus",
    "InstagramProgress",
    "PublishReceipt",
    "ServedUrlResolver",
    "get_error_info",
    "sanitize_caption",
]
