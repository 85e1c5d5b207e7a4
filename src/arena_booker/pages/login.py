"""LoginPage - authenticates against the Arena Alicante login form.

DOM structure of /Login:
  button#btnCookiesSoloNecesarias  -> cookie banner, "only necessary cookies"
  input#Username, input#Password  -> credentials
  button#submitLogin               -> submits the form (full page post)

The site gives no reliable success marker after submitting; wrong credentials
show up later as an empty schedule or a rejected reservation.
"""

import re

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from arena_booker.errors import ConfigurationError, NavigationError
from arena_booker.logging import get_logger

log = get_logger(__name__)


class LoginPage:
    """Login form at /Login."""

    URL_PATH = "/Login"
    TITLE_PATTERN = re.compile(r"Arena Alicante")

    COOKIE_BUTTON = "#btnCookiesSoloNecesarias"
    USERNAME_INPUT = "#Username"
    PASSWORD_INPUT = "#Password"
    SUBMIT_BUTTON = "#submitLogin"

    def __init__(
        self, page: Page, base_url: str, *, settle_ms: int = 3000
    ) -> None:
        self.page = page
        self.base_url = base_url
        self.settle_ms = settle_ms

    async def login(self, username: str, password: str) -> None:
        """Log in with the given credentials.

        Args:
            username: Site username.
            password: Site password.

        Raises:
            ConfigurationError: If either credential is empty (before navigating).
            NavigationError: If the page fails to load or is not the Arena login page.
        """
        if not username or not password:
            raise ConfigurationError(
                "Missing credentials: define ARENA_USER and ARENA_PASSWORD"
            )

        url = f"{self.base_url}{self.URL_PATH}"
        log.info("login_started", url=url)

        try:
            await self.page.goto(url)
            await self._dismiss_cookie_banner()

            title = await self.page.title()
            if not self.TITLE_PATTERN.search(title):
                raise NavigationError(f"Unexpected login page title {title!r}")

            if await self._already_authenticated():
                log.info("login_skipped", reason="already_authenticated", url=self.page.url)
                return

            await self.page.wait_for_selector(self.USERNAME_INPUT)
            await self.page.fill(self.USERNAME_INPUT, username)
            await self.page.fill(self.PASSWORD_INPUT, password)
            await self.page.click(self.SUBMIT_BUTTON)
        except PlaywrightError as e:
            log.error("login_failed", error=str(e), type=type(e).__name__)
            raise NavigationError(f"Login page failed: {e}") from e

        log.info("login_submitted")
        await self.page.wait_for_timeout(self.settle_ms)

    async def _dismiss_cookie_banner(self) -> None:
        button = self.page.locator(self.COOKIE_BUTTON)
        try:
            visible = await button.is_visible()
        except PlaywrightError:
            visible = False
        if visible:
            await button.click()
            await self.page.wait_for_timeout(500)
            log.debug("cookie_banner_dismissed")

    async def _already_authenticated(self) -> bool:
        """True when /Login redirected away because the session is still valid."""
        if "/login" in self.page.url.lower():
            return False
        return await self.page.locator(self.USERNAME_INPUT).count() == 0
