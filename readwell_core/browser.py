#!/usr/bin/env python3
"""
Page capture through a real browser.

Loads a URL with Playwright, records each image's document offset in
`data-readwell-top` (read back by lazyload.attribute_geometry) and returns
the rendered HTML, so the engine can work on a static snapshot.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .config import config
from .errors import CaptureError
from .lazyload import OFFSET_ATTR

logger = logging.getLogger(__name__)

VIEWPORT_WIDTH = 1280

_RECORD_OFFSETS_JS = """
    (attr) => {
        const safeTop = (el) => { try { return el.getBoundingClientRect().top + window.scrollY; } catch(e) { return null; } };
        let count = 0;
        for (const img of Array.from(document.querySelectorAll('img'))) {
            const top = safeTop(img);
            if (top !== null) {
                img.setAttribute(attr, String(Math.round(top)));
                count++;
            }
        }
        return count;
    }
"""


@dataclass
class PageSnapshot:
    url: str
    html: str
    viewport_height: int
    images_measured: int = 0


async def capture_page(
    url: str,
    viewport_height: Optional[int] = None,
    headless: Optional[bool] = None,
    timeout_ms: Optional[int] = None,
) -> PageSnapshot:
    viewport_height = viewport_height or config.viewport_height
    headless = config.headless if headless is None else headless
    timeout_ms = timeout_ms or config.nav_timeout_ms

    try:
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=headless)
            try:
                page = await browser.new_page(viewport={"width": VIEWPORT_WIDTH, "height": viewport_height})
                await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
                measured = await page.evaluate(_RECORD_OFFSETS_JS, OFFSET_ATTR)
                html = await page.content()
                logger.info(f"Captured {url} ({len(html)} chars, {measured} image(s) measured)")
                return PageSnapshot(url=page.url, html=html, viewport_height=viewport_height, images_measured=measured)
            finally:
                await browser.close()
    except PlaywrightError as e:
        raise CaptureError(f"Could not capture {url}: {e}") from e
