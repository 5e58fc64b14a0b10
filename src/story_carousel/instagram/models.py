"""Data models for Instagram posting."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class InstagramPostStatus(str, Enum):
    """Status of an Instagram posting operation."""
    PENDING = "pending"
    CREATING_CONTAINERS = "creating_containers"
    PUBLISHING = "publishing"
    PUBLISHED = "published"


@dataclass
class InstagramProgress:
    """Progress of one carousel publish, passed to the progress callback."""
    status: InstagramPostStatus = InstagramPostStatus.PENDING
    current_step: str = "Initializing..."
    progress_percent: float = 0.0

    total_images: int = 0
    containers_created: int = 0
    container_ids: list[str] = field(default_factory=list)
    carousel_container_id: str | None = None


@dataclass(frozen=True)
class PublishReceipt:
    """What the publish API returns for a live post."""
    post_id: str
    permalink: str | None = None
    published_at: datetime = field(default_factory=datetime.now)
