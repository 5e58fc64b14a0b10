"""Slide design: style profiles, markup templates, placeholder composer."""

from .composer import PlaceholderComposer
from .templates import STYLE_PROFILES, StyleProfile, get_style_profile

__all__ = [
    "PlaceholderComposer",
    "STYLE_PROFILES",
    "StyleProfile",
    "get_style_profile",
]
