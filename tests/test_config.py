"""Tests for configuration loading."""

from story_carousel.config import DEFAULT_CONFIG_PATH, CarouselConfig, InstagramSettings, load_config
from story_carousel.constants import BATCH_SIZE, CHUNK_SOFT_MAX


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.yaml")
        assert config == CarouselConfig()
        assert config.batch.batch_size == BATCH_SIZE
        assert config.chunk.soft_max == CHUNK_SOFT_MAX

    def test_partial_yaml_overrides(self, tmp_path):
        path = tmp_path / "carousel.yaml"
        path.write_text("batch:\n  batch_size: 4\nbrand:\n  name: Orbit Tales\n", encoding="utf-8")

        config = load_config(path)

        assert config.batch.batch_size == 4
        assert config.brand.name == "Orbit Tales"
        assert config.render.width == CarouselConfig().render.width

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "carousel.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == CarouselConfig()

    def test_shipped_config_loads(self):
        config = load_config(DEFAULT_CONFIG_PATH)
        assert config.render.width == 1080
        assert config.publish.media_host in ("served", "cloudinary")


class TestInstagramSettings:
    """Tests for credential checks."""

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("INSTAGRAM_USER_ID", "1789")
        monkeypatch.setenv("INSTAGRAM_ACCESS_TOKEN", "tok")

        settings = InstagramSettings()

        assert settings.instagram_user_id == "1789"
        assert settings.missing_instagram() == []

    def test_missing_names(self):
        settings = InstagramSettings(instagram_user_id="", instagram_access_token="", cloudinary_api_key="k")
        assert settings.missing_instagram() == ["INSTAGRAM_USER_ID", "INSTAGRAM_ACCESS_TOKEN"]
        assert settings.missing_cloudinary() == ["CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_SECRET"]
