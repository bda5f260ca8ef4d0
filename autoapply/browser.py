"""Scoped Playwright browser sessions.

A session owns one browser, one context and one page. It is always used as a
context manager so the browser is closed on every exit path.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable

from autoapply.config import Settings, load_settings
from autoapply.errors import TransientNavigationError
from autoapply.log import get_logger

log = get_logger(__name__)

SCROLL_STEP_PX = 800
SCROLL_SETTLE_MS = 750

SessionFactory = Callable[[], "BrowserSession"]


def _clean_browsers_path() -> None:
    # Stale sandbox paths make Playwright look for browsers that are not there
    pw = os.environ.get("PLAYWRIGHT_BROWSERS_PATH", "")
    if pw and not Path(pw).exists():
        os.environ.pop("PLAYWRIGHT_BROWSERS_PATH", None)


class BrowserSession:
    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or load_settings()
        self._playwright = None
        self._browser = None
        self.page: Any = None

    def __enter__(self) -> "BrowserSession":
        _clean_browsers_path()
        from playwright.sync_api import sync_playwright

        self._playwright = sync_playwright().start()
        try:
            self._browser = self._playwright.chromium.launch(
                headless=self.settings.headless,
                args=["--no-sandbox", "--disable-dev-shm-usage", "--disable-gpu"],
            )
            context = self._browser.new_context(
                viewport={"width": 1280, "height": 900},
                user_agent=self.settings.user_agent,
            )
            self.page = context.new_page()
            self.page.set_default_navigation_timeout(self.settings.navigation_timeout_ms)
            self.page.set_default_timeout(self.settings.navigation_timeout_ms)
        except Exception:
            self.close()
            raise
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        if self._browser is not None:
            try:
                self._browser.close()
            except Exception as exc:
                log.debug("Browser close failed: %s", exc)
            self._browser = None
        if self._playwright is not None:
            try:
                self._playwright.stop()
            except Exception as exc:
                log.debug("Playwright stop failed: %s", exc)
            self._playwright = None
        self.page = None


def scroll_to_bottom(page, *, step: int = SCROLL_STEP_PX, settle_ms: int = SCROLL_SETTLE_MS) -> int:
    """Scroll until the position stops advancing; returns the number of scroll steps.

    Lazy-loaded lists grow while we scroll, so the loop ends on a stall rather
    than after a fixed time.
    """
    steps = 0
    position = page.evaluate("() => window.scrollY")
    while True:
        page.evaluate(f"() => window.scrollBy(0, {int(step)})")
        page.wait_for_timeout(settle_ms)
        new_position = page.evaluate("() => window.scrollY")
        if new_position <= position:
            return steps
        position = new_position
        steps += 1


def navigate(page, url: str, *, timeout_ms: int | None = None, wait_until: str = "domcontentloaded") -> None:
    """page.goto with Playwright timeouts and network errors mapped to TransientNavigationError."""
    from playwright.sync_api import Error as PlaywrightError

    try:
        page.goto(url, wait_until=wait_until, timeout=timeout_ms)
    except PlaywrightError as exc:
        # playwright's TimeoutError subclasses its Error
        first_line = str(exc).split("\n")[0][:150]
        raise TransientNavigationError(f"Could not load {url}: {first_line}") from exc
