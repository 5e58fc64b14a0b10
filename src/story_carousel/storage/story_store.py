"""Story storage on the local filesystem.

Structure:
    data/stories/
        <story_id>.json       # Story record (title, body, share_status, ...)
        <story_id>.original   # Optional pre-existing image bytes
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Protocol

from ..content.models import ShareStatus, Story
from ..monitoring.errors import StoryNotFoundError

_logger = logging.getLogger("carousel.pipeline")

_SAFE_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class StoryStore(Protocol):
    """Where stories and their share status live."""

    def get_story(self, story_id: str) -> Story | None:
        ...

    def update_share_status(self, story_id: str, status: ShareStatus) -> None:
        ...


class JsonStoryStore:
    """One JSON file per story.

    Usage:
        store = JsonStoryStore(Path("data/stories"))
        story = store.get_story("42")
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    @staticmethod
    def is_valid_id(story_id: str) -> bool:
        """Ids are plain file stems, no separators or leading dots."""
        return bool(_SAFE_ID.fullmatch(story_id))

    def _json_path(self, story_id: str) -> Path:
        if not self.is_valid_id(story_id):
            raise ValueError(f"Invalid story id: {story_id!r}")
        return self.root / f"{story_id}.json"

    def _image_path(self, story_id: str) -> Path:
        return self.root / f"{story_id}.original"

    def get_story(self, story_id: str) -> Story | None:
        """Load a story, or None when it does not exist.

        Ids that could never have been saved count as missing.
        """
        if not self.is_valid_id(story_id):
            return None
        path = self._json_path(story_id)
        if not path.exists():
            return None

        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        story = Story(**data)

        image_path = self._image_path(story_id)
        if image_path.exists():
            story.original_image = image_path.read_bytes()
        return story

    def save_story(self, story: Story) -> Path:
        """Write a story (and its original image bytes, if any)."""
        path = self._json_path(story.id)
        self._write_json(path, story.model_dump(mode="json"))
        if story.original_image:
            self._image_path(story.id).write_bytes(story.original_image)
        return path

    def update_share_status(self, story_id: str, status: ShareStatus) -> None:
        """Persist a new share status.

        Raises:
            StoryNotFoundError: If the story does not exist.
        """
        if not self.is_valid_id(story_id):
            raise StoryNotFoundError(story_id)
        path = self._json_path(story_id)
        if not path.exists():
            raise StoryNotFoundError(story_id)

        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        data["share_status"] = status.model_dump(mode="json")
        self._write_json(path, data)
        _logger.info(f"STORY:{story_id} | SHARE STATUS SAVED | shared:{status.shared} | post:{status.post_id}")

    def list_stories(self) -> list[str]:
        """Story ids, sorted."""
        if not self.root.exists():
            return []
        return sorted(p.stem for p in self.root.glob("*.json"))

    def _write_json(self, path: Path, data: dict) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)
