#!/usr/bin/env python3

"""
Apply-Link Scraper - Main Entry Point
Logs in to the job board and collects each listing's employer apply URL
"""

import logging
import sys
from config_loader import ConfigValidationError, load_config
from collector import ExtractionWorkflow


def setup_logging(config) -> None:
    """Configure logging for the application"""
    log_file = config.get_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    log_level = getattr(logging, config.get_log_level(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )
    logging.getLogger('playwright').setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized: {log_file}")


def display_config(config) -> None:
    """Display loaded configuration (credentials excluded)"""
    logger = logging.getLogger(__name__)
    site = config.get_site()

    print("\n" + "="*60)
    print("🤖 APPLY-LINK SCRAPER v0.1")
    print("="*60)

    print("\n🌐 SITE:")
    print(f"  Start URL: {config.get_start_url()}")
    print(f"  Login: {site.login_url}")
    print(f"  Search: {site.search_url}")
    print(f"  Apply redirect base: {site.apply_base_url}")

    print(f"\n📊 Max listings per run: {config.get_max_listings()}")

    print(f"\n⚙️  BROWSER SETTINGS:")
    print(f"  Headless mode: {config.is_headless()}")
    print(f"  Navigation timeout: {config.get_navigation_timeout()/1000}s")
    print(f"  Redirect deadline: {config.get_redirect_deadline()/1000}s")

    print(f"\n💾 OUTPUT:")
    print(f"  Results: {config.get_results_path()}")
    print(f"  Screenshots: {config.get_screenshot_dir()}")

    print("\n" + "="*60 + "\n")

    logger.info(f"Config validated: {config!r}")


def main():
    """Main execution function"""
    print("\n🚀 Starting Apply-Link Scraper...")

    # Load configuration
    try:
        config = load_config()
    except FileNotFoundError as e:
        print(f"❌ Error: {e}")
        print("Make sure config/settings.yaml exists!")
        return 1
    except ConfigValidationError as e:
        print(f"❌ {e}")
        print("Check your .env (BASE_URL, LOGIN_PATH, SEARCH_PATH, APPLY_PATH, EMAIL, PASSWORD)")
        return 1
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        return 1

    # Setup logging
    setup_logging(config)
    logger = logging.getLogger(__name__)

    display_config(config)

    workflow = ExtractionWorkflow(config)
    records = workflow.run()

    print("\n" + "="*60)
    print("✅ EXTRACTION COMPLETE")
    print("="*60)
    print(f"\n📊 Results: {len(records)} jobs recorded")
    print(f"📁 File: {config.get_results_path()}")
    print("\n" + "="*60 + "\n")

    logger.info(f"Run complete: {len(records)} jobs saved")
    return 0


if __name__ == "__main__":
    sys.exit(main())
