# -*- coding: utf-8 -*-
"""Playwright host adapter.

Drives a real browser for the three things a static snapshot cannot do:
reading a live chat page (with its React state), rasterizing the
conversation to PNG, and printing the export view to PDF.
"""

from pathlib import Path
from typing import Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeout
from playwright.sync_api import sync_playwright

from .errors import ContainerNotFound, RasterizationFailure
from .image import Rasterizer
from .log import log_debug
from .profiles import Profile
from .state import CAPTURE_STATE_SCRIPT

HEAD_STYLES_SCRIPT = """
() => Array.from(document.querySelectorAll('link[rel="stylesheet"], style'))
    .map(el => el.outerHTML).join('\\n')
"""

FONTS_READY_SCRIPT = "() => document.fonts.ready.then(() => true)"


class LivePage:
    """A chat page open in the browser."""

    def __init__(self, page, profile: Profile):
        self.page = page
        self.profile = profile

    def wait_for_container(self, timeout_s: float = 0) -> None:
        """Block until the conversation container is attached. 0 waits forever."""
        selector = self.profile.locators.container
        log_debug(f"Waiting for {selector} (timeout={timeout_s or 'none'})")
        try:
            self.page.wait_for_selector(selector, state="attached", timeout=timeout_s * 1000)
        except PlaywrightTimeout as e:
            raise ContainerNotFound(f"Chat container {selector} did not appear within {timeout_s}s") from e

    def state_selectors(self) -> list[str]:
        loc = self.profile.locators
        return [loc.final_answer, loc.thinking_chain, f"{loc.thinking_chain} {loc.thinking_paragraph}"]

    def snapshot(self) -> str:
        """Page HTML with the React props copied onto the state-bearing nodes."""
        tagged = self.page.evaluate(CAPTURE_STATE_SCRIPT, self.state_selectors())
        log_debug(f"Captured structured state on {tagged} nodes")
        return self.page.content()

    def container_html(self) -> Optional[str]:
        el = self.page.query_selector(self.profile.locators.container)
        return el.evaluate("e => e.outerHTML") if el else None

    def head_html(self) -> str:
        # Stylesheet links are relative to the chat site.
        base = f'<base href="{self.page.url}">'
        return base + "\n" + self.page.evaluate(HEAD_STYLES_SCRIPT)


class PlaywrightRasterizer(Rasterizer):
    """Screenshots ``#export-root`` of a page rendered off-screen."""

    def __init__(self, browser_type):
        self.browser_type = browser_type

    def render(self, page_html: str, width: int, scale: float, settle_ms: int) -> bytes:
        try:
            browser = self.browser_type.launch(headless=True)
        except PlaywrightError as e:
            raise RasterizationFailure(f"Could not start browser: {e}") from e
        try:
            context = browser.new_context(viewport={"width": width, "height": 800}, device_scale_factor=scale)
            page = context.new_page()
            page.set_content(page_html, wait_until="load")
            page.evaluate(FONTS_READY_SCRIPT)
            page.wait_for_timeout(settle_ms)
            root = page.query_selector("#export-root")
            if root is None:
                raise RasterizationFailure("Render root missing from page")
            return root.screenshot(type="png", omit_background=False)
        except PlaywrightError as e:
            raise RasterizationFailure(str(e)) from e
        finally:
            browser.close()


class PlaywrightPrinter:
    """Prints an HTML document to PDF (Chromium only)."""

    def __init__(self, chromium):
        self.chromium = chromium

    def print_pdf(self, html_doc: str, path: Path, settle_ms: int = 500) -> Path:
        browser = self.chromium.launch(headless=True)
        try:
            page = browser.new_page()
            page.set_content(html_doc, wait_until="load")
            page.wait_for_timeout(settle_ms)
            page.pdf(path=str(path), format="A4", print_background=True)
        finally:
            browser.close()
        return path


class BrowserHost:
    """Owns the Playwright driver for one command.

    Use as a context manager; everything it hands out is closed on exit.
    """

    def __init__(self, engine: str = "chromium", headless: bool = False, user_data_dir: Optional[str] = None):
        self.engine = engine
        self.headless = headless
        self.user_data_dir = user_data_dir
        self._pw = None
        self._closers = []

    def __enter__(self):
        self._pw = sync_playwright().start()
        return self

    def __exit__(self, exc_type, exc, tb):
        for close in reversed(self._closers):
            try:
                close()
            except PlaywrightError as e:
                log_debug(f"Ignoring error while closing browser: {e}")
        self._closers.clear()
        self._pw.stop()
        self._pw = None

    @property
    def browser_type(self):
        return getattr(self._pw, self.engine)

    def open_live(self, url: str, profile: Profile) -> LivePage:
        if self.user_data_dir:
            context = self.browser_type.launch_persistent_context(self.user_data_dir, headless=self.headless)
            self._closers.append(context.close)
        else:
            browser = self.browser_type.launch(headless=self.headless)
            self._closers.append(browser.close)
            context = browser.new_context()
        page = context.pages[0] if context.pages else context.new_page()
        page.goto(url)
        return LivePage(page, profile)

    def rasterizer(self) -> PlaywrightRasterizer:
        return PlaywrightRasterizer(self.browser_type)

    def printer(self) -> PlaywrightPrinter:
        return PlaywrightPrinter(self._pw.chromium)
