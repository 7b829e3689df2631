from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Iterator

from playwright.sync_api import Browser, Page, sync_playwright
from playwright.sync_api import Error as PlaywrightError

from housing_monitor.config import Settings

LOGGER = logging.getLogger(__name__)

LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]


@contextmanager
def browser_session(settings: Settings) -> Iterator[Browser]:
    with sync_playwright() as pw:
        browser = pw.chromium.launch(headless=settings.headless, args=LAUNCH_ARGS)
        LOGGER.debug("Launched Chromium (headless=%s)", settings.headless)
        try:
            yield browser
        finally:
            browser.close()
            LOGGER.debug("Browser closed")


def capture_error_screenshot(page: Page, artifact_dir: str, name: str) -> str | None:
    os.makedirs(artifact_dir, exist_ok=True)
    path = os.path.join(artifact_dir, f"{name}-error.png")
    try:
        page.screenshot(path=path)
    except PlaywrightError as exc:
        LOGGER.debug("Could not capture screenshot %s: %s", path, exc)
        return None
    LOGGER.info("Saved error screenshot to %s", path)
    return path
