from __future__ import annotations

import logging
import re
from pathlib import Path

from playwright.sync_api import Browser, Error as PlaywrightError, Page, TimeoutError as PlaywrightTimeout, sync_playwright

from .config import Config
from .dom import HEIGHT_ATTR, WIDTH_ATTR, Node, parse_snapshot
from .models import SearchRequest

logger = logging.getLogger(__name__)

BROWSER_ARGS = ["--disable-dev-shm-usage", "--no-sandbox", "--disable-gpu"]

SEARCH_BOX_SELECTOR = 'input[name="q"], textarea[name="q"]'

# Copy each element's rendered size into attributes so it survives
# serialization to HTML.
_STAMP_SIZES_JS = f"""
() => {{
  for (const el of document.querySelectorAll('*')) {{
    if (el.offsetWidth === undefined) continue;
    el.setAttribute('{WIDTH_ATTR}', el.offsetWidth);
    el.setAttribute('{HEIGHT_ATTR}', el.offsetHeight);
  }}
}}
"""


class RenderError(RuntimeError):
    """The results page could not be produced (navigation, search box, browser)."""


def screenshot_name(request: SearchRequest) -> str:
    item = re.sub(r"\s+", "-", request.item.strip())
    where = re.sub(r"\s+", "-", request.location_hint.strip()) if request.location_hint else "nearby"
    return f"google-shopping-{item}-{where}.png"


class ShoppingSession:
    """One browser for a run of searches; each search gets a fresh context.

    Usage::

        with ShoppingSession(cfg) as session:
            root = session.render("apples price nearby", request)
    """

    def __init__(self, cfg: Config):
        self.cfg = cfg
        self._pw = None
        self._browser: Browser | None = None

    def __enter__(self) -> "ShoppingSession":
        self._pw = sync_playwright().start()
        try:
            if self.cfg.cdp_url:
                self._browser = self._pw.chromium.connect_over_cdp(self.cfg.cdp_url)
            else:
                self._browser = self._pw.chromium.launch(headless=self.cfg.headless, args=BROWSER_ARGS)
        except PlaywrightError as exc:
            self._pw.stop()
            self._pw = None
            raise RenderError(f"Could not start browser: {exc}") from exc
        return self

    def __exit__(self, *exc):
        try:
            if self._browser:
                self._browser.close()
        finally:
            if self._pw:
                self._pw.stop()
        self._pw = None
        self._browser = None

    def render(self, query: str, request: SearchRequest) -> Node:
        """Run *query* on the shopping page and return the results snapshot."""
        if self._browser is None:
            raise RenderError("ShoppingSession is not open")

        kwargs = {
            "user_agent": self.cfg.user_agent,
            "viewport": {"width": self.cfg.viewport_width, "height": self.cfg.viewport_height},
        }
        if request.has_coordinates:
            kwargs["geolocation"] = {
                "latitude": float(request.latitude),
                "longitude": float(request.longitude),
                "accuracy": 100,
            }
            kwargs["permissions"] = ["geolocation"]

        context = self._browser.new_context(**kwargs)
        context.on("console", lambda msg: logger.debug("Browser console: %s: %s", msg.type, msg.text))
        try:
            page = context.new_page()
            return self._search(page, query, request)
        except PlaywrightError as exc:
            raise RenderError(f"Browser error: {exc}") from exc
        finally:
            context.close()

    def _search(self, page: Page, query: str, request: SearchRequest) -> Node:
        cfg = self.cfg
        logger.info("Navigating to %s", cfg.shopping_url)
        try:
            page.goto(cfg.shopping_url, wait_until="domcontentloaded", timeout=cfg.nav_timeout_ms)
        except PlaywrightTimeout as exc:
            raise RenderError(f"Navigation to {cfg.shopping_url} timed out") from exc

        try:
            search_box = page.wait_for_selector(SEARCH_BOX_SELECTOR, timeout=cfg.search_box_timeout_ms)
        except PlaywrightTimeout as exc:
            raise RenderError("Search box not found") from exc
        if search_box is None:
            raise RenderError("Search box not found")

        logger.info("Typing search query: %r", query)
        search_box.fill(query)
        try:
            with page.expect_navigation(wait_until="domcontentloaded", timeout=cfg.results_timeout_ms):
                search_box.press("Enter")
        except PlaywrightTimeout as exc:
            logger.warning("Results navigation wait timed out: %s", exc)

        logger.info("Post-search URL: %s", page.url)
        page.wait_for_timeout(cfg.settle_ms)

        if cfg.screenshot_dir:
            out = Path(cfg.screenshot_dir) / screenshot_name(request)
            out.parent.mkdir(parents=True, exist_ok=True)
            page.screenshot(path=str(out))
            logger.info("Saved screenshot %s", out)

        page.evaluate(_STAMP_SIZES_JS)
        return parse_snapshot(page.content())
