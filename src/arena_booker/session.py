"""Playwright browser session for a booking run.

One Chromium browser, one context and one page are shared by every activity
of a run. The page's request context carries the login cookies, so the
reservation POST is sent from the same authenticated session.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from playwright.async_api import Page, Route, async_playwright

from arena_booker.config import BookerConfig
from arena_booker.logging import get_logger

log = get_logger(__name__)

BLOCKED_RESOURCE_TYPES: frozenset[str] = frozenset({"image", "font", "media"})


async def configure_page(
    page: Page, *, timeout_ms: int = 30000, block_resources: bool = True
) -> None:
    """Set default timeouts and optionally drop heavy static resources.

    Stylesheets are kept: the login page's cookie banner is only detected
    as visible when styles are applied.

    Args:
        page: Playwright Page instance.
        timeout_ms: Default timeout for actions and navigations.
        block_resources: If True, abort image, font and media requests.
    """

    async def _block_resources(route: Route) -> None:
        if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
            await route.abort()
        else:
            await route.continue_()

    if block_resources:
        await page.route("**/*", _block_resources)
    page.set_default_timeout(timeout_ms)
    page.set_default_navigation_timeout(timeout_ms)


@asynccontextmanager
async def browser_session(config: BookerConfig) -> AsyncIterator[Page]:
    """Launch Chromium and yield a configured page, closing everything on exit.

    Args:
        config: Booker configuration (headless flag, timeouts, blocking).

    Yields:
        Page ready for LoginPage / SchedulePage / ReservationClient.
    """
    async with async_playwright() as pw:
        browser = await pw.chromium.launch(headless=config.headless)
        try:
            context = await browser.new_context(locale="es-ES")
            page = await context.new_page()
            await configure_page(
                page,
                timeout_ms=config.timeout_ms,
                block_resources=config.block_resources,
            )
            log.info(
                "browser_session_started",
                headless=config.headless,
                timeout_ms=config.timeout_ms,
            )
            yield page
        finally:
            await browser.close()
            log.info("browser_session_closed")
