"""
Extraction Workflow - Playwright-based apply-link collector
Logs in once, walks the search results and resolves each job's apply URL
"""

import logging
import time
from typing import Callable, List, Optional
from playwright.sync_api import sync_playwright, Page, Browser, BrowserContext, Playwright
from authenticator import Authenticator
from listing_iterator import ListingIterator
from models import JobRecord, LoginResult, RedirectOutcome, RedirectStatus
from navigator import SessionNavigator
from output_writer import OutputWriter, ResultLog
from redirect_resolver import RedirectResolver
from run_tally import RunTally

logger = logging.getLogger(__name__)

ERROR_STATE_SCREENSHOT = "error-state.png"


class ExtractionWorkflow:
    """Runs the search → login → search → detail → redirect → search cycle"""

    def __init__(self, config, page: Optional[Page] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config
        self.site = config.get_site()
        self.clock = clock
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.tally = RunTally()
        self.results = ResultLog(OutputWriter(config.get_results_path()))
        if page is not None:
            self._bind_page(page)

    def _bind_page(self, page: Page) -> None:
        """Build the page-bound components around the single shared page"""
        self.page = page
        self.navigator = SessionNavigator(
            page,
            navigation_timeout_ms=self.config.get_navigation_timeout(),
            settle_timeout_ms=self.config.get_settle_timeout(),
            screenshot_dir=self.config.get_screenshot_dir(),
        )
        self.authenticator = Authenticator(
            self.navigator,
            self.site,
            email_selectors=self.config.get_email_selectors(),
            password_selectors=self.config.get_password_selectors(),
            submit_selectors=self.config.get_submit_selectors(),
            submit_settle_timeout_ms=self.config.get_login_settle_timeout(),
        )
        self.iterator = ListingIterator(
            self.navigator,
            search_url=self.site.search_url,
            search_path=self.site.search_path,
            listing_selector=self.config.get_listing_selector(),
            max_listings=self.config.get_max_listings(),
            click_attempts=self.config.get_click_attempts(),
            click_retry_delay_ms=self.config.get_click_retry_delay(),
        )
        self.resolver = RedirectResolver(
            self.navigator,
            self.site,
            settle_timeout_ms=self.config.get_redirect_settle_timeout(),
            deadline_ms=self.config.get_redirect_deadline(),
            clock=self.clock,
        )

    def start_browser(self) -> None:
        """Launch Chromium with a single page"""
        logger.info("Starting browser...")
        self.playwright = sync_playwright().start()
        self.browser = self.playwright.chromium.launch(
            headless=self.config.is_headless(),
            slow_mo=self.config.get_slow_mo(),
        )
        self.context = self.browser.new_context(viewport={"width": 1280, "height": 800})
        self._bind_page(self.context.new_page())
        logger.info("Browser started successfully")

    def stop_browser(self) -> None:
        """Clean up browser resources"""
        try:
            if self.context:
                self.context.close()
        except Exception:
            logger.debug("Browser context close failed", exc_info=True)
        try:
            if self.browser:
                self.browser.close()
        except Exception:
            logger.debug("Browser close failed", exc_info=True)
        try:
            if self.playwright:
                self.playwright.stop()
        except Exception:
            logger.debug("Playwright stop failed", exc_info=True)
        logger.info("Browser closed")

    def _login(self) -> LoginResult:
        result = self.authenticator.login(self.config.get_credentials())
        self.tally.login_result = result
        if result != LoginResult.SUCCESS:
            logger.warning(f"Login did not complete ({result.value}); continuing to search page")
        return result

    def _append(self, record: JobRecord) -> None:
        self.results.append(record)
        self.tally.attempted += 1

    def _count_outcome(self, outcome: RedirectOutcome) -> None:
        self.tally.record_outcome(outcome.status)
        if outcome.status in (RedirectStatus.TIMED_OUT, RedirectStatus.FAILED):
            logger.warning(f"Redirect {outcome.status.value} for {outcome.trigger_url}: {outcome.reason}")

    def process_listing(self, index: int) -> JobRecord:
        """Click row `index`, read the detail URL and resolve its apply URL"""
        job_number = index + 1
        self.iterator.click_row(index)

        logger.info("Waiting for job details page to load...")
        self.navigator.settle(self.config.get_detail_settle_timeout())

        job_url = self.navigator.current_url
        logger.info(f"Job URL: {job_url}")

        outcome = self.resolver.resolve(job_url)
        self._count_outcome(outcome)
        logger.info(f"Final company URL: {outcome.apply_url_value()}")

        record = JobRecord(
            job_index=job_number,
            job_url=job_url,
            company_apply_url=outcome.apply_url_value(),
        )
        self._append(record)
        logger.info(f"Job {job_number} complete - Company URL: {record.company_apply_url} [{self.tally.progress()}]")
        return record

    def record_failure(self, index: int, exc: Exception) -> None:
        """Per-item error handler: failure record plus a screenshot"""
        job_number = index + 1
        logger.error(f"Error processing job {job_number}: {exc}")
        self.tally.record_item_failure()

        if len(self.results) < job_number:
            self._append(JobRecord.failed(job_number))
        else:
            logger.warning(f"Job {job_number} already recorded; not adding a failure entry")
        logger.info(f"Job {job_number} recorded as failed [{self.tally.progress()}]")

        self.navigator.capture_screenshot(f"error-job-{job_number}.png")

    def _log_final_results(self) -> None:
        logger.info("=== FINAL RESULTS ===")
        for record in self.results:
            logger.info(str(record))

    def _sync_component_counters(self) -> None:
        if self.page is None:
            return
        self.tally.click_retries = self.iterator.click_retries
        self.tally.return_failures = self.iterator.return_failures
        self.tally.checkpoint_failures = self.results.save_failures
        self.tally.screenshots_saved = self.navigator.screenshots_saved

    def handle(self, url: str) -> List[JobRecord]:
        """Process one handed-in URL. Never raises past the top-level catch."""
        logger.info(f"Processing: {url}")

        try:
            self.page.set_default_timeout(self.config.get_default_timeout())
            self.navigator.navigate_and_settle(url)
            logger.info(f"Page title: {self.navigator.title()}")

            if self.site.search_path in url:
                logger.info("On search results page - logging in first!")
                self._login()

                logger.info("Navigating back to search page...")
                self.navigator.navigate_and_settle(self.site.search_url)
                # Rows are rendered a moment after the network goes quiet
                self.navigator.pause(self.config.get_post_search_delay())

                total_rows = self.iterator.count_rows()
                self.tally.listings_found = total_rows
                attempted = self.iterator.for_each_listing(
                    self.process_listing,
                    self.record_failure,
                    max_count=self.config.get_max_listings(),
                )
                self.tally.listings_to_process = attempted
                self._log_final_results()
            else:
                logger.info("Not on search page, no action needed")

        except Exception as exc:
            logger.exception(f"Error in request handler: {exc}")
            self.tally.handler_error = type(exc).__name__
            self.navigator.capture_screenshot(ERROR_STATE_SCREENSHOT)

        self._sync_component_counters()
        return list(self.results)

    def run(self, url: Optional[str] = None) -> List[JobRecord]:
        """Start the browser, handle the start URL, tear down"""
        url = url or self.config.get_start_url()

        print("\n" + "="*60)
        print("🤖 STARTING APPLY-LINK EXTRACTION")
        print("="*60)

        try:
            if self.page is None:
                self.start_browser()
            self.handle(url)
        except KeyboardInterrupt:
            logger.warning("Interrupted; results file holds the records saved so far")
            print("\n⚠️  Interrupted - partial results kept")
        finally:
            self.stop_browser()
            self._sync_component_counters()
            logger.info(f"Run summary: {self.tally.summary()}")

        print(f"\n📊 Total: {len(self.results)} jobs recorded ({self.tally.progress()})")
        print("="*60 + "\n")

        logger.info(f"Extraction complete: {len(self.results)} jobs recorded")
        return list(self.results)
