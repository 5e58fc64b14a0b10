"""Slide markup templates and style profiles for story carousels."""

from __future__ import annotations

import html
from dataclasses import dataclass


@dataclass(frozen=True)
class StyleProfile:
    """Color palette for one visual theme."""

    name: str
    primary: str
    secondary: str
    accent: str
    background: str
    text: str = "#ffffff"
    text_muted: str = "#d1d5db"


STYLE_PROFILES: dict[str, StyleProfile] = {
    "cyberpunk": StyleProfile(
        name="cyberpunk",
        primary="#ff0080",
        secondary="#00ffff",
        accent="#ffff00",
        background="#1a1a1a",
        text_muted="#cccccc",
    ),
    "nature": StyleProfile(
        name="nature",
        primary="#22c55e",
        secondary="#059669",
        accent="#fbbf24",
        background="#1f2937",
        text_muted="#d1d5db",
    ),
    "space": StyleProfile(
        name="space",
        primary="#6366f1",
        secondary="#8b5cf6",
        accent="#f59e0b",
        background="#1e1b4b",
        text_muted="#c7d2fe",
    ),
    "dystopian": StyleProfile(
        name="dystopian",
        primary="#ef4444",
        secondary="#dc2626",
        accent="#f97316",
        background="#2d1b1b",
        text_muted="#fca5a5",
    ),
    "utopian": StyleProfile(
        name="utopian",
        primary="#3b82f6",
        secondary="#1d4ed8",
        accent="#06b6d4",
        background="#1e3a5f",
        text_muted="#93c5fd",
    ),
    "default": StyleProfile(
        name="default",
        primary="#6366f1",
        secondary="#4f46e5",
        accent="#a78bfa",
        background="#1a1a1a",
        text_muted="#d1d5db",
    ),
}

DEFAULT_PROFILE = STYLE_PROFILES["default"]


def get_style_profile(name: str) -> StyleProfile:
    """Palette for a visual theme name, default when unknown."""
    return STYLE_PROFILES.get(name, DEFAULT_PROFILE)


def card_styles(profile: StyleProfile) -> str:
    """Shared card CSS for every slide kind."""
    return f"""
    <style>
      * {{ box-sizing: border-box; }}
      .carousel-card {{
        width: 100%;
        height: 100%;
        background: {profile.background};
        display: flex;
        flex-direction: column;
        justify-content: center;
        align-items: center;
        padding: 80px;
        color: {profile.text};
        font-family: 'Inter', -apple-system, BlinkMacSystemFont, sans-serif;
        overflow: hidden;
      }}
      .title-card {{ text-align: center; }}
      .title-card h1 {{
        font-size: 48px;
        font-weight: 700;
        line-height: 1.3;
        margin: 0 0 30px 0;
        max-width: 90%;
      }}
      .title-card .divider {{
        width: 150px;
        height: 4px;
        background: {profile.primary};
        margin: 30px auto;
        border-radius: 2px;
      }}
      .title-card .year {{
        font-size: 36px;
        font-weight: 600;
        color: {profile.primary};
        font-family: 'JetBrains Mono', monospace;
        letter-spacing: 0.05em;
      }}
      .content-card {{ text-align: left; padding: 80px 80px 120px 80px; }}
      .content-card .content {{ font-size: 28px; line-height: 1.7; }}
      .content-card p {{ margin: 0 0 28px 0; text-align: justify; }}
      .content-card p:last-of-type {{ margin-bottom: 0; }}
      .quote-highlight {{ font-style: italic; color: {profile.accent}; font-weight: 600; }}
      .branding-card {{ text-align: center; }}
      .branding-card h1 {{
        font-size: 48px;
        font-weight: 600;
        margin: 0 0 15px 0;
        color: {profile.text_muted};
      }}
      .branding-card h2 {{ font-size: 72px; font-weight: 800; margin: 0 0 30px 0; }}
      .branding-card .subtitle {{ font-size: 28px; color: {profile.text_muted}; margin: 0; }}
    </style>
    """


def title_slide(title: str, year: int | None, profile: StyleProfile) -> str:
    """Markup for the title slide."""
    year_html = f'<div class="year">Year {year}</div>' if year else ""
    return f"""
    {card_styles(profile)}
    <div class="carousel-card title-card">
      <h1>{html.escape(title)}</h1>
      <div class="divider"></div>
      {year_html}
    </div>
    """


def content_slide(chunk: str, profile: StyleProfile) -> str:
    """Markup for one content slide. Paragraphs with dialogue are highlighted."""
    paragraphs = []
    for paragraph in chunk.split("\n\n"):
        escaped = html.escape(paragraph)
        if '"' in paragraph or "'" in paragraph:
            escaped = f'<span class="quote-highlight">{escaped}</span>'
        paragraphs.append(f"<p>{escaped}</p>")
    body = "".join(paragraphs)

    return f"""
    {card_styles(profile)}
    <div class="carousel-card content-card">
      <div class="content">{body}</div>
    </div>
    """


def branding_slide(brand_name: str, tagline: str, profile: StyleProfile) -> str:
    """Markup for the closing branding slide."""
    return f"""
    {card_styles(profile)}
    <div class="carousel-card branding-card">
      <h1>Created with</h1>
      <h2>{html.escape(brand_name)}</h2>
      <p class="subtitle">{html.escape(tagline)}</p>
    </div>
    """


def fallback_slide(ordinal: int) -> str:
    """Static placeholder markup used when a slide fails to render."""
    return f"""
    {card_styles(DEFAULT_PROFILE)}
    <div class="carousel-card title-card">
      <h1>Slide {ordinal + 1}</h1>
      <div class="divider"></div>
    </div>
    """
