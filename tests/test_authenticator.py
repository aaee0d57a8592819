from authenticator import Authenticator, find_first_match
from config_loader import DEFAULT_EMAIL_SELECTORS, DEFAULT_PASSWORD_SELECTORS, DEFAULT_SUBMIT_SELECTORS
from models import Credentials, LoginResult, SiteConfig
from navigator import SessionNavigator
from conftest import (
    APPLY_PATH,
    BASE_URL,
    LOGIN_PATH,
    LOGIN_URL,
    SEARCH_PATH,
    fail_goto,
)

CREDS = Credentials(email="seeker@example.com", password="hunter2")
SITE = SiteConfig(base_url=BASE_URL, login_path=LOGIN_PATH, search_path=SEARCH_PATH, apply_path=APPLY_PATH)


def make_authenticator(page, tmp_path):
    navigator = SessionNavigator(page, screenshot_dir=tmp_path)
    return Authenticator(
        navigator,
        SITE,
        email_selectors=DEFAULT_EMAIL_SELECTORS,
        password_selectors=DEFAULT_PASSWORD_SELECTORS,
        submit_selectors=DEFAULT_SUBMIT_SELECTORS,
    )


def test_first_candidate_with_matches_wins(page):
    page.url = LOGIN_URL
    page.dom[LOGIN_URL] = {'input[name*="Email"]': 2, "#email": 1}
    match = find_first_match(page, DEFAULT_EMAIL_SELECTORS, "Email")
    assert match.selector == 'input[name*="Email"]'
    assert match.index == 0


def test_no_candidate_matches(page):
    page.url = LOGIN_URL
    assert find_first_match(page, DEFAULT_EMAIL_SELECTORS, "Email") is None


def test_broken_candidate_is_skipped(page):
    page.url = LOGIN_URL
    page.dom[LOGIN_URL] = {'input[name*="email"]': 1}
    page.broken_selectors.add('input[type="email"]')
    match = find_first_match(page, DEFAULT_EMAIL_SELECTORS, "Email")
    assert match.selector == 'input[name*="email"]'


def test_login_success_fills_and_submits(site_page, tmp_path):
    result = make_authenticator(site_page, tmp_path).login(CREDS)
    assert result == LoginResult.SUCCESS
    assert site_page.visits == [LOGIN_URL]
    assert site_page.filled == {
        'input[type="email"]': "seeker@example.com",
        'input[type="password"]': "hunter2",
    }
    assert site_page.clicks == [('button[type="submit"]', 0)]
    # ordinary settle for the login page, extended settle after submit
    assert site_page.load_waits == [5000, 10000]


def test_third_candidate_used_when_only_it_matches(page, tmp_path):
    page.dom[LOGIN_URL] = {
        'input[name*="Email"]': 1,
        'input[name*="Password"]': 1,
        'button:has-text("Login")': 1,
    }
    result = make_authenticator(page, tmp_path).login(CREDS)
    assert result == LoginResult.SUCCESS
    assert set(page.filled) == {'input[name*="Email"]', 'input[name*="Password"]'}
    assert page.clicks == [('button:has-text("Login")', 0)]


def test_missing_password_field_reports_and_screenshots(page, tmp_path):
    page.dom[LOGIN_URL] = {'input[type="email"]': 1, 'button[type="submit"]': 1}
    result = make_authenticator(page, tmp_path).login(CREDS)
    assert result == LoginResult.FIELDS_NOT_FOUND
    assert (tmp_path / "login-debug.png").exists()
    assert page.filled == {}
    assert page.clicks == []


def test_missing_submit_control(page, tmp_path):
    page.dom[LOGIN_URL] = {'input[type="email"]': 1, 'input[type="password"]': 1}
    result = make_authenticator(page, tmp_path).login(CREDS)
    assert result == LoginResult.SUBMIT_NOT_FOUND
    assert len(page.filled) == 2
    assert page.clicks == []


def test_login_page_that_fails_to_load(site_page, tmp_path):
    site_page.before_goto = fail_goto(LOGIN_URL)
    result = make_authenticator(site_page, tmp_path).login(CREDS)
    assert result == LoginResult.NAVIGATION_FAILED
    assert site_page.filled == {}


def test_fill_failure_is_contained(site_page, tmp_path):
    site_page.unfillable.add('input[type="password"]')
    result = make_authenticator(site_page, tmp_path).login(CREDS)
    assert result == LoginResult.INTERACTION_FAILED
    assert site_page.clicks == []
