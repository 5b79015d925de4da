"""
Rendering surface.

The timeline only talks to the `Surface` protocol. `PlaywrightSurface` is the
production implementation backed by headless Chromium.

Mutation scripts are JavaScript functions taking a single ``[targets, arg]``
pair, where ``targets`` is the list of element handles passed to
`Surface.apply_mutation` (empty when the mutation acts on the document root).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

from playwright.sync_api import Browser, Page, Playwright, sync_playwright
from playwright.sync_api import Error as PlaywrightError

from h2v.errors import SetupError, TransitionError

logger = logging.getLogger(__name__)

# Collapsed <details> would hide section headings from screenshots
EXPAND_DETAILS = "els => els.forEach(d => { d.open = true; })"


class Surface(Protocol):
    """What the timeline needs from a rendered document."""

    def query_selector_all(self, selector: str) -> list[Any]: ...

    def apply_mutation(
        self, script: str, targets: Sequence[Any] = (), arg: Any = None
    ) -> None: ...

    def render_to_image(self) -> bytes: ...

    def close(self) -> None: ...


class PlaywrightSurface:
    """A Chromium page holding the source document."""

    def __init__(self, playwright: Playwright, browser: Browser, page: Page):
        self._playwright = playwright
        self._browser = browser
        self.page = page

    @classmethod
    def open(
        cls,
        location: str,
        viewport: tuple[int, int] = (1920, 1080),
        headless: bool = True,
    ) -> PlaywrightSurface:
        """Launch Chromium and load ``location``.

        Raises SetupError if the browser cannot start, the document fails to
        load, or the server answers with an error status. Nothing is left
        running on failure.
        """
        playwright: Playwright | None = None
        browser: Browser | None = None
        try:
            playwright = sync_playwright().start()
            browser = playwright.chromium.launch(headless=headless)
            width, height = viewport
            page = browser.new_page(viewport={"width": width, "height": height})
            response = page.goto(location, wait_until="networkidle")
            if response is not None and not response.ok:
                raise SetupError(
                    f"Failed to load '{location}': HTTP {response.status} {response.status_text}"
                )
            page.eval_on_selector_all("details", EXPAND_DETAILS)
        except SetupError:
            _abandon(playwright, browser)
            raise
        except PlaywrightError as e:
            _abandon(playwright, browser)
            raise SetupError(f"Failed to load '{location}': {e}") from e

        logger.info(f"Loaded {location} at {width}x{height}")
        return cls(playwright, browser, page)

    def query_selector_all(self, selector: str) -> list[Any]:
        try:
            return self.page.query_selector_all(selector)
        except PlaywrightError as e:
            raise TransitionError(f"Query '{selector}' failed: {e}") from e

    def apply_mutation(
        self, script: str, targets: Sequence[Any] = (), arg: Any = None
    ) -> None:
        try:
            self.page.evaluate(script, [list(targets), arg])
        except PlaywrightError as e:
            raise TransitionError(f"Mutation failed: {e}") from e

    def render_to_image(self) -> bytes:
        try:
            return self.page.screenshot()
        except PlaywrightError as e:
            raise TransitionError(f"Screenshot failed: {e}") from e

    def close(self) -> None:
        _shutdown(self._playwright, self._browser)

    def __enter__(self) -> PlaywrightSurface:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def _shutdown(playwright: Playwright | None, browser: Browser | None) -> None:
    """Close the browser, then stop the driver even if closing failed."""
    try:
        if browser is not None:
            browser.close()
    finally:
        if playwright is not None:
            playwright.stop()


def _abandon(playwright: Playwright | None, browser: Browser | None) -> None:
    # The startup error is the one worth reporting
    try:
        _shutdown(playwright, browser)
    except PlaywrightError as e:
        logger.warning(f"Browser cleanup after failed start also failed: {e}")
