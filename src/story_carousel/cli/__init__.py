"""Carousel CLI.

Usage:
    carousel --help
    carousel preview <story-id>
    carousel render <story-id> --output out/
    carousel share <story-id>
"""

from .app import app, main

__all__ = ["app", "main"]
