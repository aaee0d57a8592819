"""
Authenticator - logs in through whatever login form markup the site serves
"""

import logging
from typing import List, Optional
from playwright.sync_api import Locator, Page, Error as PlaywrightError
from models import Credentials, LoginResult, SiteConfig
from navigator import NavigationError, SessionNavigator

logger = logging.getLogger(__name__)

LOGIN_DEBUG_SCREENSHOT = "login-debug.png"


def find_first_match(page: Page, selectors: List[str], role: str) -> Optional[Locator]:
    """Return the first match of the first selector with at least one hit.

    Candidates are probed in order; a candidate that errors (bad selector
    syntax, detached frame) counts as zero matches.
    """
    for selector in selectors:
        try:
            count = page.locator(selector).count()
        except PlaywrightError as exc:
            logger.warning(f"{role} selector \"{selector}\" failed: {exc}")
            count = 0
        logger.info(f"{role} selector \"{selector}\": {count} found")
        if count > 0:
            return page.locator(selector).first
    return None


class Authenticator:
    """Fills and submits the login form once per run"""

    def __init__(self, navigator: SessionNavigator, site: SiteConfig,
                 email_selectors: List[str], password_selectors: List[str],
                 submit_selectors: List[str], submit_settle_timeout_ms: int = 10000):
        self.navigator = navigator
        self.site = site
        self.email_selectors = email_selectors
        self.password_selectors = password_selectors
        self.submit_selectors = submit_selectors
        self.submit_settle_timeout_ms = submit_settle_timeout_ms

    @property
    def page(self) -> Page:
        return self.navigator.page

    def login(self, credentials: Credentials) -> LoginResult:
        logger.info("Navigating to login page...")
        try:
            self.navigator.navigate_and_settle(self.site.login_url)
        except NavigationError as exc:
            logger.error(f"Could not load login page: {exc}")
            return LoginResult.NAVIGATION_FAILED

        logger.info(f"Current URL after login navigation: {self.navigator.current_url}")

        email_field = find_first_match(self.page, self.email_selectors, "Email")
        password_field = find_first_match(self.page, self.password_selectors, "Password")

        if email_field is None or password_field is None:
            logger.error("Could not find email or password fields")
            logger.info("Taking screenshot for debugging...")
            self.navigator.capture_screenshot(LOGIN_DEBUG_SCREENSHOT)
            return LoginResult.FIELDS_NOT_FOUND

        logger.info("Found email and password fields, filling them...")
        try:
            email_field.fill(credentials.email)
            password_field.fill(credentials.password)
        except PlaywrightError as exc:
            logger.error(f"Failed to fill login form: {exc}")
            return LoginResult.INTERACTION_FAILED

        logger.info("Credentials filled, looking for submit button...")
        submit_button = find_first_match(self.page, self.submit_selectors, "Submit")
        if submit_button is None:
            logger.error("No submit button found")
            return LoginResult.SUBMIT_NOT_FOUND

        logger.info("Found submit button, clicking...")
        try:
            submit_button.click()
        except PlaywrightError as exc:
            logger.error(f"Failed to click submit button: {exc}")
            return LoginResult.INTERACTION_FAILED
        self.navigator.settle(self.submit_settle_timeout_ms)

        logger.info(f"After login click, URL: {self.navigator.current_url}")
        if self.navigator.is_on(self.site.login_path):
            # Some sites keep the login path on the post-login landing page
            logger.warning("Still on the login page after submitting; login may have failed")
        return LoginResult.SUCCESS
