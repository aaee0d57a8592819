"""

Configuration loader for the apply-link scraper
Reads settings.yaml, overlays site settings and credentials from the environment
"""

import yaml
import os
from pathlib import Path
from typing import Dict, Any, List, Mapping, Optional
from datetime import datetime
import logging
from dotenv import load_dotenv
from listing_iterator import MAX_LISTINGS
from models import Credentials, SiteConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/settings.yaml"
DEFAULT_BASE_URL = "https://www.greaterroccareers.com"

DEFAULT_EMAIL_SELECTORS = [
    'input[type="email"]',
    'input[name*="email"]',
    'input[name*="Email"]',
    '#email',
    '#Email',
]
DEFAULT_PASSWORD_SELECTORS = [
    'input[type="password"]',
    'input[name*="password"]',
    'input[name*="Password"]',
    '#password',
    '#Password',
]
DEFAULT_SUBMIT_SELECTORS = [
    'input[type="submit"]',
    'button[type="submit"]',
    'button:has-text("Login")',
    'button:has-text("Sign In")',
    'input[value*="Login"]',
]


class ConfigValidationError(ValueError):
    """Raised when configuration fails invariant validation."""
    pass


def _validate_positive(value: Any, field: str) -> None:
    """Validate that a numeric value is positive (> 0)."""
    if value is not None and float(value) <= 0:
        raise ConfigValidationError(
            f"Invalid config: '{field}' must be positive (> 0), got {value}"
        )


def _validate_non_negative(value: Any, field: str) -> None:
    """Validate that a numeric value is non-negative."""
    if value is not None and float(value) < 0:
        raise ConfigValidationError(
            f"Invalid config: '{field}' must be non-negative, got {value}"
        )


def _validate_at_most(value: Any, limit: float, field: str) -> None:
    """Validate that a numeric value does not exceed a hard limit."""
    if value is not None and float(value) > limit:
        raise ConfigValidationError(
            f"Invalid config: '{field}' must be at most {limit}, got {value}"
        )


def _validate_required(value: Optional[str], field: str) -> None:
    if not (value or "").strip():
        raise ConfigValidationError(f"Invalid config: '{field}' is required")


def _validate_selector_list(value: Any, field: str) -> None:
    if value is None:
        return
    if not isinstance(value, list) or not value or not all(isinstance(v, str) and v for v in value):
        raise ConfigValidationError(
            f"Invalid config: '{field}' must be a non-empty list of selectors"
        )


class ConfigLoader:
    """Loads and validates configuration from YAML file and environment"""

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH, environ: Optional[Mapping[str, str]] = None):
        self.config_path = Path(config_path)
        self.config: Dict[str, Any] = {}
        self.environ = os.environ if environ is None else environ
        self._load()

    def _load(self) -> None:
        """Load config from YAML file"""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        try:
            with open(self.config_path, 'r') as f:
                self.config = yaml.safe_load(f) or {}
            logger.info(f"✓ Config loaded from {self.config_path}")
        except yaml.YAMLError as e:
            logger.error(f"Error parsing config file: {e}")
            raise

        self._validate_invariants()

    def _validate_invariants(self) -> None:
        """Validate configuration invariants. Raises ConfigValidationError on failure."""
        # Site and credentials
        _validate_required(self._site_value('BASE_URL', 'base_url', DEFAULT_BASE_URL), 'BASE_URL')
        _validate_required(self._site_value('LOGIN_PATH', 'login_path'), 'LOGIN_PATH')
        _validate_required(self._site_value('SEARCH_PATH', 'search_path'), 'SEARCH_PATH')
        _validate_required(self._site_value('APPLY_PATH', 'apply_path'), 'APPLY_PATH')
        _validate_required(self._env('EMAIL'), 'EMAIL')
        _validate_required(self._env('PASSWORD'), 'PASSWORD')
        _validate_required(self.get('site.job_path_marker', '/job/'), 'site.job_path_marker')

        # Browser timeouts (must be positive)
        for key in (
            'browser.default_timeout',
            'browser.navigation_timeout',
            'browser.settle_timeout',
            'browser.login_settle_timeout',
            'browser.detail_settle_timeout',
            'browser.redirect_settle_timeout',
            'browser.redirect_deadline',
        ):
            _validate_positive(self.get(key), key)
        _validate_non_negative(self.get('browser.slow_mo'), 'browser.slow_mo')
        _validate_non_negative(self.get('browser.click_retry_delay'), 'browser.click_retry_delay')
        _validate_non_negative(self.get('browser.post_search_delay'), 'browser.post_search_delay')

        # Limits
        _validate_positive(self.get('browser.click_attempts'), 'browser.click_attempts')
        _validate_positive(self.get('search.max_listings'), 'search.max_listings')
        _validate_at_most(self.get('search.max_listings'), MAX_LISTINGS, 'search.max_listings')

        # Selectors
        _validate_required(self.get('selectors.listing_row', '.listRow'), 'selectors.listing_row')
        for key in ('selectors.email', 'selectors.password', 'selectors.submit'):
            _validate_selector_list(self.get(key), key)

        logger.debug("✓ Config invariants validated")

    def _env(self, name: str) -> str:
        return (self.environ.get(name) or "").strip()

    def _site_value(self, env_name: str, key: str, default: str = "") -> str:
        return self._env(env_name) or (self.get(f'site.{key}', '') or '').strip() or default

    def get(self, key: str, default: Any = None) -> Any:
        """Get config value by dot notation (e.g., 'browser.headless')"""
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k, default)
            else:
                return default

        return value

    # === Site Config ===

    def get_site(self) -> SiteConfig:
        """Get target site URLs"""
        return SiteConfig(
            base_url=self._site_value('BASE_URL', 'base_url', DEFAULT_BASE_URL),
            login_path=self._site_value('LOGIN_PATH', 'login_path'),
            search_path=self._site_value('SEARCH_PATH', 'search_path'),
            apply_path=self._site_value('APPLY_PATH', 'apply_path'),
            job_path_marker=self.get('site.job_path_marker', '/job/'),
        )

    def get_start_url(self) -> str:
        """Get the URL handed to the workflow (defaults to the search page)"""
        return self.get('site.start_url', '') or self.get_site().search_url

    def get_credentials(self) -> Credentials:
        """Get login credentials (environment only)"""
        return Credentials(email=self._env('EMAIL'), password=self._env('PASSWORD'))

    # === Selector Config ===

    def get_listing_selector(self) -> str:
        """Get selector matching one job row on the search page"""
        return self.get('selectors.listing_row', '.listRow')

    def get_email_selectors(self) -> List[str]:
        return list(self.get('selectors.email') or DEFAULT_EMAIL_SELECTORS)

    def get_password_selectors(self) -> List[str]:
        return list(self.get('selectors.password') or DEFAULT_PASSWORD_SELECTORS)

    def get_submit_selectors(self) -> List[str]:
        return list(self.get('selectors.submit') or DEFAULT_SUBMIT_SELECTORS)

    # === Search Config ===

    def get_max_listings(self) -> int:
        """Get hard ceiling on rows processed per run"""
        return int(self.get('search.max_listings', MAX_LISTINGS))

    # === Browser Config ===

    def is_headless(self) -> bool:
        """Check if browser should run in headless mode"""
        return self.get('browser.headless', False)

    def get_slow_mo(self) -> int:
        """Get Playwright slow_mo in milliseconds"""
        return int(self.get('browser.slow_mo', 50))

    def get_default_timeout(self) -> int:
        """Get default operation timeout in milliseconds"""
        return int(self.get('browser.default_timeout', 15) * 1000)

    def get_navigation_timeout(self) -> int:
        """Get page.goto timeout in milliseconds"""
        return int(self.get('browser.navigation_timeout', 15) * 1000)

    def get_settle_timeout(self) -> int:
        """Get network-quiet wait after ordinary navigations in milliseconds"""
        return int(self.get('browser.settle_timeout', 5) * 1000)

    def get_login_settle_timeout(self) -> int:
        """Get network-quiet wait after submitting the login form in milliseconds"""
        return int(self.get('browser.login_settle_timeout', 10) * 1000)

    def get_detail_settle_timeout(self) -> int:
        """Get network-quiet wait after clicking a job row in milliseconds"""
        return int(self.get('browser.detail_settle_timeout', 10) * 1000)

    def get_redirect_settle_timeout(self) -> int:
        """Get fallback timer of the redirect settle branch in milliseconds"""
        return int(self.get('browser.redirect_settle_timeout', 10) * 1000)

    def get_redirect_deadline(self) -> int:
        """Get hard deadline of the redirect race in milliseconds"""
        return int(self.get('browser.redirect_deadline', 20) * 1000)

    def get_click_attempts(self) -> int:
        return int(self.get('browser.click_attempts', 3))

    def get_click_retry_delay(self) -> int:
        """Get pause between row click attempts in milliseconds"""
        return int(self.get('browser.click_retry_delay', 1) * 1000)

    def get_post_search_delay(self) -> int:
        """Get pause after loading the search page for dynamic rows, in milliseconds"""
        return int(self.get('browser.post_search_delay', 1) * 1000)

    # === Output Config ===

    def get_results_path(self) -> Path:
        """Get path of the incrementally rewritten results file"""
        return Path(self.get('output.results_file', 'extracted-jobs.json'))

    def get_screenshot_dir(self) -> Path:
        """Get directory for diagnostic screenshots"""
        return Path(self.get('output.screenshot_dir', '.'))

    # === Logging Config ===

    def get_log_level(self) -> str:
        """Get logging level"""
        return self.get('logging.level', 'INFO')

    def get_log_file(self) -> Path:
        """Get log file path with timestamp"""
        template = self.get('logging.log_file', 'logs/apply_scraper.log')
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        filename = template.replace('{timestamp}', timestamp)
        return Path(filename)

    def __repr__(self) -> str:
        site = self.get_site()
        return f"<Config: base_url={site.base_url}, max_listings={self.get_max_listings()}>"


# Convenience function
def load_config(config_path: Optional[str] = None) -> ConfigLoader:
    """Load .env and configuration from file"""
    # .env and the default settings file are both found from the working directory
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    path = config_path or os.getenv("APPLY_SCRAPER_CONFIG") or DEFAULT_CONFIG_PATH
    return ConfigLoader(path)
