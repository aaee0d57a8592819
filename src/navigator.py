"""
Session Navigator - page-to-page transitions with bounded waits
"""

import logging
from pathlib import Path
from typing import Optional
from playwright.sync_api import Page, Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError
from models import SettleResult

logger = logging.getLogger(__name__)


class NavigationError(Exception):
    """Raised when a page load fails or exceeds its timeout."""

    def __init__(self, url: str, cause: Exception):
        super().__init__(f"Navigation to {url} failed: {cause}")
        self.url = url
        self.cause = cause


class SessionNavigator:
    """Drives the single shared page between site states"""

    def __init__(self, page: Page, navigation_timeout_ms: int = 15000,
                 settle_timeout_ms: int = 5000, screenshot_dir: Path = Path(".")):
        self.page = page
        self.navigation_timeout_ms = navigation_timeout_ms
        self.settle_timeout_ms = settle_timeout_ms
        self.screenshot_dir = Path(screenshot_dir)
        self.screenshots_saved = 0

    @property
    def current_url(self) -> str:
        return self.page.url or ""

    def title(self) -> str:
        try:
            return self.page.title() or ""
        except PlaywrightError as exc:
            logger.debug("Title lookup failed: %s", exc)
            return ""

    def is_on(self, path: str) -> bool:
        """Check if the current URL contains the given path"""
        return bool(path) and path in self.current_url

    def settle(self, timeout_ms: Optional[int] = None) -> SettleResult:
        """Wait for network quiet, giving up when the fallback timer expires first."""
        timeout_ms = self.settle_timeout_ms if timeout_ms is None else timeout_ms
        try:
            self.page.wait_for_load_state("networkidle", timeout=timeout_ms)
            return SettleResult.SETTLED
        except PlaywrightTimeoutError:
            logger.debug("Network did not go quiet within %sms; continuing", timeout_ms)
            return SettleResult.TIMED_OUT

    def goto(self, url: str) -> None:
        """Issue a page load bounded by the navigation timeout."""
        try:
            self.page.goto(url, timeout=self.navigation_timeout_ms)
        except PlaywrightError as exc:
            raise NavigationError(url, exc) from exc

    def navigate_and_settle(self, url: str, settle_timeout_ms: Optional[int] = None) -> SettleResult:
        """Load url, then wait for the page to settle. Raises NavigationError."""
        self.goto(url)
        result = self.settle(settle_timeout_ms)
        logger.debug("Loaded %s (%s)", url, result.value)
        return result

    def pause(self, ms: int) -> None:
        if ms > 0:
            self.page.wait_for_timeout(ms)

    def capture_screenshot(self, name: str) -> Optional[Path]:
        """Best-effort screenshot; never raises."""
        path = self.screenshot_dir / name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self.page.screenshot(path=str(path))
        except Exception as exc:
            logger.error(f"Failed to save screenshot {path}: {exc}")
            return None
        self.screenshots_saved += 1
        logger.info(f"Screenshot saved as {path}")
        return path
