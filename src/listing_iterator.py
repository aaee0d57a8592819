"""
Listing Iterator - walks job rows on the search results page

Row handles are never kept across a navigation: every access re-queries the
page and picks the row by index.
"""

import logging
from typing import Callable, Optional
from playwright.sync_api import Locator, Error as PlaywrightError
from navigator import NavigationError, SessionNavigator

logger = logging.getLogger(__name__)

MAX_LISTINGS = 20


class RowUnavailableError(Exception):
    """Raised when a row index is past the rows present after a reload."""

    def __init__(self, index: int, available: int):
        super().__init__(
            f"Job row {index + 1} no longer available after reload ({available} rows found)"
        )
        self.index = index
        self.available = available


class ListingIterator:
    """Processes a bounded prefix of the listing rows, one at a time"""

    def __init__(self, navigator: SessionNavigator, search_url: str, search_path: str,
                 listing_selector: str, max_listings: int = MAX_LISTINGS,
                 click_attempts: int = 3, click_retry_delay_ms: int = 1000):
        self.navigator = navigator
        self.search_url = search_url
        self.search_path = search_path
        self.listing_selector = listing_selector
        self.max_listings = max_listings
        self.click_attempts = click_attempts
        self.click_retry_delay_ms = click_retry_delay_ms
        self.click_retries = 0
        self.return_failures = 0

    def count_rows(self) -> int:
        return self.navigator.page.locator(self.listing_selector).count()

    def row(self, index: int) -> Locator:
        """Look up row `index` on the current page."""
        available = self.count_rows()
        if index >= available:
            raise RowUnavailableError(index, available)
        return self.navigator.page.locator(self.listing_selector).nth(index)

    def ensure_on_search_page(self, index: int) -> None:
        """Reload the search page if a previous step left it, then re-check the row."""
        if self.navigator.is_on(self.search_path):
            return
        logger.info("Not on search page, navigating back...")
        self.navigator.navigate_and_settle(self.search_url)
        self.row(index)

    def click_row(self, index: int) -> int:
        """Click row `index`, retrying with a pause. Returns the attempt that succeeded."""
        attempt = 0
        while True:
            attempt += 1
            try:
                logger.info(f"Attempting to click job {index + 1} (attempt {attempt})")
                self.row(index).click()
                logger.info(f"Successfully clicked on job {index + 1} (attempt {attempt})")
                return attempt
            except (PlaywrightError, RowUnavailableError) as exc:
                if attempt >= self.click_attempts:
                    raise
                self.click_retries += 1
                logger.warning(f"Click attempt {attempt} failed: {exc}")
                self.navigator.pause(self.click_retry_delay_ms)

    def return_to_search(self) -> bool:
        try:
            logger.info("Going back to search results...")
            self.navigator.navigate_and_settle(self.search_url)
            logger.info("Back on search page")
            return True
        except NavigationError as exc:
            self.return_failures += 1
            logger.error(f"Failed to return to search: {exc}")
            return False

    def for_each_listing(self, per_item: Callable[[int], None],
                         on_error: Callable[[int, Exception], None],
                         max_count: Optional[int] = None) -> int:
        """Run per_item(index) for each row in the capped working set.

        Any exception from a single item goes to on_error(index, exc) and the
        loop moves on. Returns the number of rows attempted.
        """
        cap = min(max_count or MAX_LISTINGS, self.max_listings, MAX_LISTINGS)
        total_rows = self.count_rows()
        total = min(total_rows, cap)
        logger.info(f"Found {total_rows} job listings, processing {total}")

        for index in range(total):
            logger.info(f"=== Processing job {index + 1}/{total} ===")
            try:
                self.ensure_on_search_page(index)
                per_item(index)
            except Exception as exc:
                try:
                    on_error(index, exc)
                except Exception as handler_exc:
                    logger.error(f"Failure handler for job {index + 1} raised: {handler_exc}")

            # The next row is always looked up on a freshly loaded search page
            self.return_to_search()

        return total
