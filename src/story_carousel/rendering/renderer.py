"""HTML-to-image slide rendering with headless Chromium (Playwright)."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from playwright.async_api import Browser, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from ..constants import RENDER_MAX_PAGES
from ..monitoring.errors import RenderError
from .models import RenderedImage, RenderOptions

_logger = logging.getLogger("carousel.render")

HEALTH_CHECK_MARKUP = '<div style="width:100%;height:100%;background:#1a1a1a;color:#fff">Health Check</div>'


class SlideRenderer(Protocol):
    """Anything that turns slide markup into image bytes.

    Implementations raise RenderError on failure (timeouts included).
    """

    async def render(self, markup: str, options: RenderOptions) -> RenderedImage:
        ...


def wrap_document(markup: str, options: RenderOptions) -> str:
    """Wrap slide markup in a full HTML document sized to the render options."""
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <style>
    html, body {{
      margin: 0;
      padding: 0;
      width: {options.width}px;
      height: {options.height}px;
      overflow: hidden;
    }}
  </style>
</head>
<body>
{markup}
</body>
</html>"""


class PlaywrightRenderer:
    """Render slides with one shared headless browser and a bounded page pool.

    Usage:
        async with PlaywrightRenderer(max_pages=2) as renderer:
            image = await renderer.render(markup, RenderOptions())
    """

    def __init__(self, max_pages: int = RENDER_MAX_PAGES, headless: bool = True):
        self.max_pages = max_pages
        self.headless = headless
        self._semaphore = asyncio.Semaphore(max_pages)
        self._start_lock = asyncio.Lock()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._render_count = 0

    async def __aenter__(self) -> "PlaywrightRenderer":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def start(self) -> None:
        """Launch the shared browser if it is not running."""
        async with self._start_lock:
            if self._browser is not None and self._browser.is_connected():
                return
            try:
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=self.headless,
                    args=["--disable-dev-shm-usage", "--no-sandbox"],
                )
            except PlaywrightError as e:
                raise RenderError(f"Browser launch failed: {e}") from e
            _logger.info(f"BROWSER | STARTED | max_pages:{self.max_pages}")

    async def close(self) -> None:
        """Close the browser and stop Playwright."""
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        _logger.info(f"BROWSER | CLOSED | renders:{self._render_count}")

    async def render(self, markup: str, options: RenderOptions) -> RenderedImage:
        """Render markup to an image.

        Raises:
            RenderError: On browser failure or when the render exceeds
                options.timeout_ms.
        """
        await self.start()
        async with self._semaphore:
            try:
                data = await asyncio.wait_for(
                    self._screenshot(markup, options),
                    timeout=options.timeout_ms / 1000,
                )
            except asyncio.TimeoutError as e:
                raise RenderError(f"Render timed out after {options.timeout_ms}ms") from e
            except PlaywrightError as e:
                raise RenderError(f"Render failed: {e}") from e

        self._render_count += 1
        return RenderedImage(
            data=data,
            format=options.format,
            width=int(options.width * options.device_scale),
            height=int(options.height * options.device_scale),
        )

    async def _screenshot(self, markup: str, options: RenderOptions) -> bytes:
        page = await self._browser.new_page(
            viewport={"width": options.width, "height": options.height},
            device_scale_factor=options.device_scale,
        )
        try:
            await page.set_content(
                wrap_document(markup, options),
                wait_until="load",
                timeout=options.timeout_ms,
            )
            screenshot_args = {
                "type": options.format,
                "clip": {"x": 0, "y": 0, "width": options.width, "height": options.height},
                "timeout": options.timeout_ms,
            }
            if options.format == "jpeg":
                screenshot_args["quality"] = options.quality
            return await page.screenshot(**screenshot_args)
        finally:
            await page.close()

    async def health_check(self) -> dict:
        """Render a tiny test slide."""
        options = RenderOptions(width=200, height=200, device_scale=1.0, timeout_ms=10000)
        try:
            image = await self.render(HEALTH_CHECK_MARKUP, options)
        except RenderError as e:
            return {"healthy": False, "message": f"Image generation failed: {e}"}
        if not image.data:
            return {"healthy": False, "message": "Generated image is empty"}
        return {"healthy": True, "message": "Image generation service operational"}
