"""Carousel configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    BATCH_PAUSE_SECONDS,
    BATCH_SIZE,
    CACHE_TTL_SECONDS,
    CHUNK_FLOOR,
    CHUNK_HARD_MAX,
    CHUNK_SOFT_MAX,
    ERROR_HISTORY_SIZE,
    FALLBACK_RENDER_TIMEOUT_MS,
    HEALTH_CACHE_CRITICAL,
    HEALTH_MAX_ERROR_RATE,
    HEALTH_RENDER_CRITICAL,
    HEALTH_WINDOW_SECONDS,
    RENDER_CACHE_MAX_SIZE,
    RENDER_DEVICE_SCALE,
    RENDER_HEIGHT,
    RENDER_MAX_PAGES,
    RENDER_QUALITY,
    RENDER_TIMEOUT_MS,
    RENDER_WIDTH,
)

# Load .env file
load_dotenv()

PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "carousel.yaml"


class RenderSettings(BaseModel):
    """Slide rendering settings."""

    width: int = RENDER_WIDTH
    height: int = RENDER_HEIGHT
    format: str = "png"
    quality: int = RENDER_QUALITY
    device_scale: float = RENDER_DEVICE_SCALE
    timeout_ms: int = RENDER_TIMEOUT_MS
    fallback_timeout_ms: int = FALLBACK_RENDER_TIMEOUT_MS
    max_pages: int = RENDER_MAX_PAGES
    headless: bool = True


class CacheSettings(BaseModel):
    """Render cache and carousel store settings."""

    enabled: bool = True
    max_size: int = RENDER_CACHE_MAX_SIZE
    max_age_seconds: int = CACHE_TTL_SECONDS
    enable_disk_cache: bool = False
    disk_cache_dir: str = "cache/rendered"
    store_ttl_seconds: int = CACHE_TTL_SECONDS
    store_max_entries: int | None = None


class BatchSettings(BaseModel):
    """Batch rendering settings."""

    batch_size: int = BATCH_SIZE
    batch_pause_seconds: float = BATCH_PAUSE_SECONDS


class ChunkSettings(BaseModel):
    """Content chunking budgets (characters per slide)."""

    soft_max: int = CHUNK_SOFT_MAX
    floor: int = CHUNK_FLOOR
    hard_max: int = CHUNK_HARD_MAX


class MonitorSettings(BaseModel):
    """Error monitor thresholds."""

    history_size: int = ERROR_HISTORY_SIZE
    window_seconds: int = HEALTH_WINDOW_SECONDS
    max_error_rate: float = HEALTH_MAX_ERROR_RATE
    render_critical: int = HEALTH_RENDER_CRITICAL
    cache_critical: int = HEALTH_CACHE_CRITICAL


class BrandSettings(BaseModel):
    """Branding slide and caption text."""

    name: str = "Story Carousel"
    tagline: str = "AI-Powered Speculative Fiction"
    caption_lines: list[str] = Field(default_factory=lambda: [
        "Generated with AI",
        "Speculative Fiction",
        "Created with Story Carousel",
    ])
    base_hashtags: list[str] = Field(default_factory=lambda: [
        "#StoryCarousel",
        "#AIFiction",
        "#SpeculativeFiction",
        "#StoryGeneration",
        "#FutureWorlds",
        "#AIWriting",
        "#CreativeAI",
    ])
    closing_question: str = "What future do you envision? Share your thoughts below!"
    closing_hashtags: str = "#carousel #story #fiction"


class PublishSettings(BaseModel):
    """Publishing settings."""

    media_host: str = "served"  # served, cloudinary
    cloudinary_folder: str = "story-carousel"
    container_poll_interval: float = 5.0
    container_max_wait_seconds: int = 300


class CarouselConfig(BaseModel):
    """Complete carousel pipeline configuration."""

    render: RenderSettings = Field(default_factory=RenderSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    batch: BatchSettings = Field(default_factory=BatchSettings)
    chunk: ChunkSettings = Field(default_factory=ChunkSettings)
    monitor: MonitorSettings = Field(default_factory=MonitorSettings)
    brand: BrandSettings = Field(default_factory=BrandSettings)
    publish: PublishSettings = Field(default_factory=PublishSettings)
    stories_dir: str = "data/stories"


class InstagramSettings(BaseSettings):
    """Instagram and Cloudinary credentials read from the environment."""

    model_config = SettingsConfigDict(extra="ignore")

    instagram_user_id: str = ""
    instagram_access_token: str = ""
    instagram_api_version: str = "v21.0"
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    carousel_public_base_url: str = ""

    def missing_instagram(self) -> list[str]:
        """Names of unset variables required for publishing."""
        missing = []
        if not self.instagram_user_id:
            missing.append("INSTAGRAM_USER_ID")
        if not self.instagram_access_token:
            missing.append("INSTAGRAM_ACCESS_TOKEN")
        return missing

    def missing_cloudinary(self) -> list[str]:
        """Names of unset variables required for Cloudinary uploads."""
        missing = []
        if not self.cloudinary_cloud_name:
            missing.append("CLOUDINARY_CLOUD_NAME")
        if not self.cloudinary_api_key:
            missing.append("CLOUDINARY_API_KEY")
        if not self.cloudinary_api_secret:
            missing.append("CLOUDINARY_API_SECRET")
        return missing


def load_config(config_path: Path | None = None) -> CarouselConfig:
    """Load carousel configuration from YAML file."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        # Return default config if file doesn't exist
        return CarouselConfig()

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    return CarouselConfig(**(data or {}))
