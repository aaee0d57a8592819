"""
Redirect Resolver - turns a job detail URL into the employer's apply URL

The site exposes an apply-redirect endpoint keyed by the job code. Visiting it
normally forwards the browser off-site; when it does not, the page can still
go network-quiet while sitting on the trigger URL, so the final URL (not the
settle signal) decides success.
"""

import logging
import time
from typing import Callable, Optional
from playwright.sync_api import Error as PlaywrightError
from models import RedirectOutcome, SiteConfig
from navigator import NavigationError, SessionNavigator

logger = logging.getLogger(__name__)

RACE_COMPLETE = "complete"
RACE_TIMEOUT = "timeout"


def extract_job_code(job_url: str, marker: str = "/job/") -> Optional[str]:
    """Return the path segment right after `marker`, or None if absent."""
    if not job_url or marker not in job_url:
        return None
    tail = job_url.split(marker, 1)[1]
    for stop in ("?", "#"):
        tail = tail.split(stop, 1)[0]
    code = tail.split("/", 1)[0]
    return code or None


def build_redirect_url(apply_base_url: str, code: str) -> str:
    return f"{apply_base_url}/{code}"


class RedirectResolver:
    """Resolves one job at a time on the shared page"""

    def __init__(self, navigator: SessionNavigator, site: SiteConfig,
                 settle_timeout_ms: int = 10000, deadline_ms: int = 20000,
                 clock: Callable[[], float] = time.monotonic):
        self.navigator = navigator
        self.site = site
        self.settle_timeout_ms = settle_timeout_ms
        self.deadline_ms = deadline_ms
        self.clock = clock

    def race_redirect(self) -> str:
        """Race the settle branch against the hard deadline.

        The settle branch is network quiet or its own fallback timer. Its wait
        is capped at the deadline, so the losing branch never outlives the
        call. If the deadline has passed when the settle branch returns, the
        deadline wins, including on an exact tie.
        """
        started = self.clock()
        self.navigator.settle(min(self.settle_timeout_ms, self.deadline_ms))
        elapsed_ms = (self.clock() - started) * 1000
        if elapsed_ms >= self.deadline_ms:
            logger.warning(f"Redirect taking too long at URL: {self.navigator.current_url}")
            return RACE_TIMEOUT
        return RACE_COMPLETE

    def resolve(self, job_url: str) -> RedirectOutcome:
        code = extract_job_code(job_url, self.site.job_path_marker)
        if code is None:
            logger.warning(f"No {self.site.job_path_marker} found in URL: {job_url}")
            return RedirectOutcome.not_applicable(f"no job code in {job_url}")

        redirect_url = build_redirect_url(self.site.apply_base_url, code)
        logger.info(f"Code: {code}, Going to: {redirect_url}")

        try:
            self.navigator.goto(redirect_url)
            logger.info("Waiting for redirect...")
            race_result = self.race_redirect()

            final_url = self.navigator.current_url
            logger.info(f"Current URL after redirect attempt: {final_url}")
        except (NavigationError, PlaywrightError) as exc:
            logger.error(f"Redirect failed: {exc}")
            return RedirectOutcome.failed(str(exc), trigger_url=redirect_url)

        if race_result == RACE_TIMEOUT or final_url == redirect_url:
            logger.warning(f"Redirect timed out or failed at: {final_url}")
            self._leave_stuck_redirect()
            reason = "deadline reached" if race_result == RACE_TIMEOUT else "stayed on trigger URL"
            return RedirectOutcome.timed_out(redirect_url, reason)

        logger.info("Redirect successful")
        return RedirectOutcome.resolved(final_url, redirect_url)

    def _leave_stuck_redirect(self) -> None:
        """Go straight back to search; the page may be stuck off-site."""
        logger.info("Redirect failed, returning to search page...")
        try:
            self.navigator.navigate_and_settle(self.site.search_url)
        except NavigationError as exc:
            logger.error(f"Could not return to search after failed redirect: {exc}")
