"""Story persistence."""

from .story_store import JsonStoryStore, StoryStore

__all__ = ["JsonStoryStore", "StoryStore"]
