"""Headless Chromium session shared by every page visit of a run."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from playwright.sync_api import Page, sync_playwright

from perkscraper.config import Settings

logger = logging.getLogger(__name__)

_LAUNCH_ARGS = ["--no-sandbox", "--disable-gpu", "--disable-dev-shm-usage"]


@contextmanager
def browser_session(settings: Settings) -> Iterator[Page]:
    """Launch one browser, open one page, and yield it.

    The browser is closed on every exit path, including when the body raises.
    """
    with sync_playwright() as pw:
        browser = pw.chromium.launch(headless=settings.headless, args=_LAUNCH_ARGS)
        logger.info("Browser launched (headless=%s)", settings.headless)
        try:
            page = browser.new_page(
                user_agent=settings.user_agent,
                viewport={
                    "width": settings.viewport_width,
                    "height": settings.viewport_height,
                },
            )
            yield page
        finally:
            browser.close()
            logger.info("Browser closed")
