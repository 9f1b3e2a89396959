"""Headless Chromium renderer for eBay search-result pages.

Result lists on eBay are assembled client-side, so the rendered-page sampler
needs a real browser. ``HeadlessBrowser`` holds one Chromium process, one
context and one tab for a single sampling run; use it as an async context
manager so everything is closed however the run ends.

Images, media, fonts and tracker hosts are aborted at the router to keep
page loads short. If Chromium is not installed yet, the first launch
failure triggers a single ``playwright install chromium`` and one retry.
"""

import asyncio
import logging
from typing import Any

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    Route,
    async_playwright,
)

from ..config import BrowserConfig, config

logger = logging.getLogger(__name__)

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-first-run",
    "--disable-blink-features=AutomationControlled",
]
VIEWPORT = {"width": 1366, "height": 768}

BLOCKED_RESOURCE_TYPES = frozenset({"image", "media", "font"})
BLOCKED_DOMAINS = (
    "google-analytics",
    "googletagmanager",
    "doubleclick",
    "adsystem",
    "facebook",
    "twitter",
    "pinterest",
    "siftscience",
)


class HeadlessBrowser:
    """One-tab Chromium session exposing ``render(url) -> html``."""

    def __init__(self, settings: BrowserConfig | None = None) -> None:
        self.settings = settings or config.browser
        self.playwright: Playwright | None = None
        self.browser: Browser | None = None
        self.context: BrowserContext | None = None
        self.page: Page | None = None

    async def __aenter__(self) -> "HeadlessBrowser":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.stop()

    async def start(self) -> None:
        """Launch Chromium and open the tab used for rendering.

        Raises:
            playwright.async_api.Error: Launch failed, also after an
                on-demand browser install.
        """
        try:
            await self._launch()
        except Exception as e:
            await self.stop()
            if not _needs_browser_install(str(e)):
                logger.error(f"Chromium launch failed: {e}")
                raise
            logger.warning("Chromium binaries not found, installing them once")
            if not await install_chromium():
                raise
            try:
                await self._launch()
            except Exception:
                await self.stop()
                raise
        logger.info("Chromium ready for rendering")

    async def _launch(self) -> None:
        self.playwright = await async_playwright().start()
        self.browser = await self.playwright.chromium.launch(
            headless=self.settings.headless, args=CHROMIUM_ARGS
        )
        self.context = await self.browser.new_context(
            user_agent=self.settings.user_agent,
            viewport=VIEWPORT,
            locale="en-US",
            java_script_enabled=True,
        )
        await self.context.route("**/*", self._route_handler)
        self.page = await self.context.new_page()

    async def stop(self) -> None:
        """Close the tab, context, browser and driver, in that order."""
        closers = [
            ("page", "close"),
            ("context", "close"),
            ("browser", "close"),
            ("playwright", "stop"),
        ]
        for attribute, method in closers:
            handle = getattr(self, attribute)
            if handle is None:
                continue
            setattr(self, attribute, None)
            try:
                await getattr(handle, method)()
            except Exception as e:
                # Teardown must reach every handle
                logger.warning(f"Could not {method} {attribute}: {e}")
        logger.debug("Chromium session released")

    async def _route_handler(self, route: Route) -> None:
        request = route.request
        if request.resource_type in BLOCKED_RESOURCE_TYPES or any(
            domain in request.url for domain in BLOCKED_DOMAINS
        ):
            await route.abort()
        else:
            await route.continue_()

    async def render(self, url: str) -> str:
        """Navigate to a URL and return the rendered HTML.

        The same tab is reused between calls so pagination keeps its
        cookies.

        Args:
            url: Page to load.

        Returns:
            Page HTML after the settle delay.

        Raises:
            RuntimeError: The session was not started.
        """
        if self.page is None:
            raise RuntimeError("HeadlessBrowser.render() called before start()")

        logger.info(f"Rendering {url}")
        await self.page.goto(
            url, wait_until="networkidle", timeout=self.settings.navigation_timeout_ms
        )
        if self.settings.settle_seconds > 0:
            await asyncio.sleep(self.settings.settle_seconds)
        return await self.page.content()


def _needs_browser_install(message: str) -> bool:
    lowered = message.lower()
    return "executable doesn't exist" in lowered or "playwright install" in lowered


async def install_chromium() -> bool:
    """Run ``playwright install chromium``; True when it exits cleanly."""
    try:
        process = await asyncio.create_subprocess_exec(
            "playwright",
            "install",
            "chromium",
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        output, _ = await process.communicate()
    except OSError as e:
        logger.error(f"Could not run playwright install: {e}")
        return False

    if output:
        logger.debug(output.decode(errors="ignore"))
    if process.returncode != 0:
        logger.error(f"playwright install chromium exited with {process.returncode}")
        return False
    logger.info("Chromium installed")
    return True
