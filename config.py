"""Configuration settings for the Hotel Records Scraper"""

import os
from dotenv import load_dotenv

load_dotenv()

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Target site
MARRIOTT_BASE_URL = os.getenv("MARRIOTT_BASE_URL", "https://www.marriott.com")

# Fetch / retry settings
SCRAPE_TIMEOUT_SECONDS = int(os.getenv("SCRAPE_TIMEOUT_SECONDS", "30"))
FETCH_MAX_ATTEMPTS = int(os.getenv("FETCH_MAX_ATTEMPTS", "3"))
FETCH_RETRY_DELAY_SECONDS = float(os.getenv("FETCH_RETRY_DELAY_SECONDS", "6.0"))
FETCH_BACKOFF_MULTIPLIER = float(os.getenv("FETCH_BACKOFF_MULTIPLIER", "1.0"))
FETCH_JITTER_SECONDS = float(os.getenv("FETCH_JITTER_SECONDS", "0"))  # 0 disables jitter

# Pacing between detail pages (on top of retry backoff)
PACING_DELAY_SECONDS = float(os.getenv("PACING_DELAY_SECONDS", "1.5"))

# Stop after this 0-based candidate position has been handled
MAX_CANDIDATE_INDEX = int(os.getenv("MAX_CANDIDATE_INDEX", "10"))

# Dynamic listing readiness
READINESS_TIMEOUT_SECONDS = float(os.getenv("READINESS_TIMEOUT_SECONDS", "40"))
READINESS_POLL_SECONDS = float(os.getenv("READINESS_POLL_SECONDS", "2"))

# Browser
BROWSER_HEADLESS = os.getenv("BROWSER_HEADLESS", "true").lower() == "true"
BROWSER_TIMEOUT_SECONDS = float(os.getenv("BROWSER_TIMEOUT_SECONDS", "60"))

# User agents rotated per fetch attempt
USER_AGENTS = [
    # Chrome on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    # Chrome on macOS
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    # Firefox
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:121.0) Gecko/20100101 Firefox/121.0",
    # Safari on macOS
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
    # Edge on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0",
]
