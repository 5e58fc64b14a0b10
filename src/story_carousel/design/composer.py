"""Placeholder slide composer using Pillow.

Last-resort rendering path: when both the primary render and the
fallback markup render fail, the slide is drawn locally so that the
carousel is always complete.
"""

from __future__ import annotations

from io import BytesIO

from PIL import Image, ImageDraw, ImageFont

from ..rendering.models import RenderOptions
from .templates import DEFAULT_PROFILE, StyleProfile


class PlaceholderComposer:
    """Draw a numbered placeholder slide.

    Usage:
        composer = PlaceholderComposer()
        data = composer.compose(ordinal=2, options=RenderOptions())
    """

    # Tried in order; falls back to the PIL default font
    FONT_PATHS = [
        # Linux
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        # Windows
        "C:/Windows/Fonts/arialbd.ttf",
        "C:/Windows/Fonts/arial.ttf",
        # macOS
        "/System/Library/Fonts/Helvetica.ttc",
        "/Library/Fonts/Arial.ttf",
    ]

    def __init__(self, profile: StyleProfile | None = None):
        self.profile = profile or DEFAULT_PROFILE
        self._font_cache: dict[int, ImageFont.FreeTypeFont | ImageFont.ImageFont] = {}

    def _hex_to_rgb(self, hex_color: str) -> tuple[int, int, int]:
        """Convert hex color to RGB tuple."""
        hex_color = hex_color.lstrip("#")
        return tuple(int(hex_color[i:i + 2], 16) for i in (0, 2, 4))

    def _get_font(self, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        """Get a font, with caching."""
        if size in self._font_cache:
            return self._font_cache[size]

        font = None
        for path in self.FONT_PATHS:
            try:
                font = ImageFont.truetype(path, size)
                break
            except OSError:
                continue

        if font is None:
            font = ImageFont.load_default()

        self._font_cache[size] = font
        return font

    def compose(
        self,
        ordinal: int,
        options: RenderOptions,
        profile: StyleProfile | None = None,
    ) -> bytes:
        """Draw a placeholder slide sized to the render options.

        Returns:
            Encoded image bytes in the options' format.
        """
        profile = profile or self.profile
        width = int(options.width * options.device_scale)
        height = int(options.height * options.device_scale)

        img = Image.new("RGB", (width, height), self._hex_to_rgb(profile.background))
        draw = ImageDraw.Draw(img)

        # Accent bar under the label
        bar_width = width // 7
        bar_height = max(2, height // 270)
        label = f"Slide {ordinal + 1}"
        font = self._get_font(max(12, height // 12))

        bbox = draw.textbbox((0, 0), label, font=font)
        text_w = bbox[2] - bbox[0]
        text_h = bbox[3] - bbox[1]
        x = (width - text_w) // 2
        y = (height - text_h) // 2 - bar_height * 4

        draw.text((x, y), label, font=font, fill=self._hex_to_rgb(profile.text))
        bar_y = y + text_h + bar_height * 8
        draw.rectangle(
            [(width - bar_width) // 2, bar_y, (width + bar_width) // 2, bar_y + bar_height],
            fill=self._hex_to_rgb(profile.primary),
        )

        buffer = BytesIO()
        if options.format == "jpeg":
            img.save(buffer, format="JPEG", quality=options.quality)
        else:
            img.save(buffer, format="PNG")
        return buffer.getvalue()
