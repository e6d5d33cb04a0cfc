from __future__ import annotations

import math

from playwright.async_api import async_playwright

from ..config import settings
from ..logger import logger


A4_WIDTH_MM = 210
A4_HEIGHT_MM = 297
PX_TO_MM = 0.26458
VIEWPORT = {"width": 1200, "height": 800}
MARGIN = {"top": "5mm", "right": "5mm", "bottom": "5mm", "left": "5mm"}

_WAIT_FOR_IMAGES_JS = """
() => Promise.all(
  Array.from(document.images)
    .filter((img) => !img.complete)
    .map((img) => new Promise((resolve) => { img.onload = img.onerror = resolve; }))
)
"""


def page_height_mm(body_height_px: float) -> int:
    """Height of the single continuous page: the content height, but never shorter than A4."""
    return max(A4_HEIGHT_MM, math.ceil(body_height_px * PX_TO_MM))


async def render_pdf(html_content: str, *, timeout_ms: int = settings.PDF_RENDER_TIMEOUT_MS) -> bytes:
    """
    Render HTML to a one-page PDF with selectable text, using Playwright.

    The page is A4 wide and as tall as the content, so nothing is split across pages.
    """
    async with async_playwright() as p:
        browser = await p.chromium.launch(
            args=["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"],
        )
        try:
            page = await browser.new_page(viewport=VIEWPORT)
            await page.set_content(html_content, wait_until="networkidle", timeout=timeout_ms)
            await page.evaluate(_WAIT_FOR_IMAGES_JS)

            body_height = await page.evaluate("() => document.body.scrollHeight")
            height_mm = page_height_mm(body_height)

            pdf_bytes = await page.pdf(
                width=f"{A4_WIDTH_MM}mm",
                height=f"{height_mm}mm",
                print_background=True,
                margin=MARGIN,
                prefer_css_page_size=False,
                page_ranges="1",
            )
        finally:
            await browser.close()

    logger.debug("Rendered PDF via Playwright", extra={"height_mm": height_mm, "size_bytes": len(pdf_bytes)})
    return pdf_bytes
