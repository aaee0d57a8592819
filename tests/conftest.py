"""Shared fixtures: a scriptable stand-in for a Playwright page and a tmp config."""

from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest
import yaml
from playwright.sync_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from config_loader import ConfigLoader

BASE_URL = "https://jobs.example.com"
LOGIN_PATH = "/account/login"
SEARCH_PATH = "/jobs/search"
APPLY_PATH = "/jobs/apply"
LOGIN_URL = BASE_URL + LOGIN_PATH
SEARCH_URL = BASE_URL + SEARCH_PATH
APPLY_BASE_URL = BASE_URL + APPLY_PATH
ROW = ".listRow"

ENVIRON = {
    "BASE_URL": BASE_URL,
    "LOGIN_PATH": LOGIN_PATH,
    "SEARCH_PATH": SEARCH_PATH,
    "APPLY_PATH": APPLY_PATH,
    "EMAIL": "seeker@example.com",
    "PASSWORD": "hunter2",
}


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str, index: Optional[int] = None):
        self.page = page
        self.selector = selector
        self.index = index

    def count(self) -> int:
        if self.selector in self.page.broken_selectors:
            raise PlaywrightError(f"Unexpected token in selector {self.selector}")
        return self.page.count(self.selector)

    @property
    def first(self) -> "FakeLocator":
        return FakeLocator(self.page, self.selector, 0)

    def nth(self, index: int) -> "FakeLocator":
        return FakeLocator(self.page, self.selector, index)

    def fill(self, value: str) -> None:
        if self.selector in self.page.unfillable:
            raise PlaywrightTimeoutError(f"Timeout filling {self.selector}")
        self.page.filled[self.selector] = value

    def click(self) -> None:
        self.page.click(self.selector, self.index or 0)


class FakePage:
    """Just enough of playwright.sync_api.Page for the workflow.

    `dom` maps a page URL to {selector: match count}. `redirects` maps a
    requested URL to where the browser ends up. Click behaviour is scripted
    per selector through `click_handlers`.
    """

    def __init__(self):
        self.url = "about:blank"
        self.page_title = "Job Board"
        self.dom: Dict[str, Dict[str, int]] = {}
        self.redirects: Dict[str, str] = {}
        self.click_handlers: Dict[str, Callable[["FakePage", int], None]] = {}
        self.before_goto: Optional[Callable[["FakePage", str], None]] = None
        self.on_wait: Optional[Callable[["FakePage", Optional[int]], None]] = None
        self.network_idle = True
        self.broken_selectors: set = set()
        self.unfillable: set = set()
        self.screenshot_error: Optional[Exception] = None
        self.visits: List[str] = []
        self.clicks: List[tuple] = []
        self.filled: Dict[str, str] = {}
        self.load_waits: List[Optional[int]] = []
        self.pauses: List[int] = []
        self.screenshots: List[str] = []
        self.default_timeout: Optional[int] = None

    def count(self, selector: str) -> int:
        return self.dom.get(self.url, {}).get(selector, 0)

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    def goto(self, url: str, timeout: Optional[int] = None):
        self.visits.append(url)
        if self.before_goto is not None:
            self.before_goto(self, url)
        self.url = self.redirects.get(url, url)

    def wait_for_load_state(self, state: str = "load", timeout: Optional[int] = None) -> None:
        self.load_waits.append(timeout)
        if self.on_wait is not None:
            self.on_wait(self, timeout)
        if not self.network_idle:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    def wait_for_timeout(self, ms: int) -> None:
        self.pauses.append(ms)

    def title(self) -> str:
        return self.page_title

    def screenshot(self, path: str) -> bytes:
        if self.screenshot_error is not None:
            raise self.screenshot_error
        Path(path).write_bytes(b"\x89PNG\r\n")
        self.screenshots.append(Path(path).name)
        return b""

    def set_default_timeout(self, ms: int) -> None:
        self.default_timeout = ms

    def click(self, selector: str, index: int) -> None:
        self.clicks.append((selector, index))
        handler = self.click_handlers.get(selector)
        if handler is not None:
            handler(self, index)


def fail_goto(*urls: str, times: int = 1) -> Callable[[FakePage, str], None]:
    """before_goto hook: the first `times` loads of each url time out."""
    remaining = {url: times for url in urls}

    def hook(page: FakePage, url: str) -> None:
        if remaining.get(url, 0) > 0:
            remaining[url] -= 1
            raise PlaywrightTimeoutError(f"Timeout 15000ms exceeded navigating to {url}")

    return hook


def job_url(number: int) -> str:
    return f"{BASE_URL}/job/JOB{number}/view"


def employer_url(number: int) -> str:
    return f"https://careers.employer{number}.example.com/apply"


def build_site(page: FakePage, rows: int = 3, login_form: bool = True) -> FakePage:
    """Script a job board: login form, `rows` listings, working redirects."""
    page.dom[SEARCH_URL] = {ROW: rows}
    if login_form:
        page.dom[LOGIN_URL] = {
            'input[type="email"]': 1,
            'input[type="password"]': 1,
            'button[type="submit"]': 1,
        }

    def open_job(p: FakePage, index: int) -> None:
        p.url = job_url(index + 1)

    def submit(p: FakePage, index: int) -> None:
        p.url = BASE_URL + "/dashboard"

    page.click_handlers[ROW] = open_job
    page.click_handlers['button[type="submit"]'] = submit
    for number in range(1, rows + 1):
        page.redirects[f"{APPLY_BASE_URL}/JOB{number}"] = employer_url(number)
    return page


@pytest.fixture
def page() -> FakePage:
    return FakePage()


@pytest.fixture
def site_page() -> FakePage:
    return build_site(FakePage())


@pytest.fixture
def make_config(tmp_path):
    """Write a settings.yaml under tmp_path and load it with a fixed environment."""

    def _make(settings: Optional[dict] = None, environ: Optional[dict] = None) -> ConfigLoader:
        data = {
            "output": {
                "results_file": str(tmp_path / "extracted-jobs.json"),
                "screenshot_dir": str(tmp_path / "shots"),
            },
            "logging": {"log_file": str(tmp_path / "logs" / "run.log")},
        }
        for section, values in (settings or {}).items():
            if isinstance(values, dict):
                data.setdefault(section, {}).update(values)
            else:
                data[section] = values
        config_path = tmp_path / "settings.yaml"
        config_path.write_text(yaml.safe_dump(data), encoding="utf-8")
        env = dict(ENVIRON) if environ is None else environ
        return ConfigLoader(str(config_path), environ=env)

    return _make
