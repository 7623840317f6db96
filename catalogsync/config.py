"""
Configuration for the catalog scraper and cache.

All tunables live here as module-level constants so that scraping,
caching and the CLI share one set of values. A few of them can be
overridden from the environment through load_settings():

    CATALOGSYNC_LAUNCH_MODE       local | serverless
    CATALOGSYNC_BROWSER_CHANNEL   e.g. "chrome" (local mode only)
    CATALOGSYNC_EXECUTABLE_PATH   chromium binary (serverless mode)
    CATALOGSYNC_CACHE_DIR         directory for the JSON cache files
    CATALOGSYNC_SCHEDULE_PATH     personal schedule JSON file
    CATALOGSYNC_CAMPUS            campus code used in the search form
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional


PACKAGE_DIR = Path(__file__).resolve().parent
DATA_DIR = PACKAGE_DIR / "data"


# ---------------------------------------------------------------------------
# Catalog site
# ---------------------------------------------------------------------------

BASE_URL = "https://catalog.uconn.edu"
SITEMAP_URL = f"{BASE_URL}/undergraduate/courses/#coursetext"
COURSE_SEARCH_URL = f"{BASE_URL}/course-search/"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

DEFAULT_CAMPUS = "STORRS@STORRS"


# ---------------------------------------------------------------------------
# HTTP, retry and batching
# ---------------------------------------------------------------------------

REQUEST_TIMEOUT_SECONDS = 10.0

MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 0.1
RETRY_BACKOFF = 1.5

# Number of subject pages fetched concurrently, and pause between batches
BATCH_SIZE = 62
BATCH_DELAY_SECONDS = 0.1


# ---------------------------------------------------------------------------
# Cache freshness
# ---------------------------------------------------------------------------

COURSES_MAX_AGE_HOURS = 168
SECTIONS_MAX_AGE_HOURS = 24

COURSES_CACHE_KEY = "courses"
SECTIONS_CACHE_PREFIX = "sections"


# ---------------------------------------------------------------------------
# Browser
# ---------------------------------------------------------------------------

LAUNCH_MODE_LOCAL = "local"
LAUNCH_MODE_SERVERLESS = "serverless"
LAUNCH_MODES = (LAUNCH_MODE_LOCAL, LAUNCH_MODE_SERVERLESS)

SERVERLESS_BROWSER_ARGS = (
    "--font-render-hinting=none",
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--single-process",
)

# Seconds to let the detail panel render after clicking a section
SECTION_PANEL_SETTLE_SECONDS = 1.0
DETAIL_PANEL_SETTLE_SECONDS = 3.0


@dataclass
class Settings:
    """
    Runtime settings resolved from defaults and the environment.
    """

    launch_mode: str = LAUNCH_MODE_LOCAL
    browser_channel: Optional[str] = None
    executable_path: Optional[str] = None
    campus: str = DEFAULT_CAMPUS
    cache_dir: Path = field(default_factory=lambda: DATA_DIR / "cache")
    schedule_path: Path = field(default_factory=lambda: DATA_DIR / "schedule.json")

    @property
    def is_serverless(self) -> bool:
        return self.launch_mode == LAUNCH_MODE_SERVERLESS


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build Settings from environment variables.

    Unknown launch modes raise ValueError so a typo in a deployment
    does not silently fall back to the local launch path.
    """
    env = os.environ if environ is None else environ

    mode = env.get("CATALOGSYNC_LAUNCH_MODE", LAUNCH_MODE_LOCAL).strip().lower()
    if mode not in LAUNCH_MODES:
        raise ValueError(f"Invalid CATALOGSYNC_LAUNCH_MODE: {mode!r} (expected one of {LAUNCH_MODES})")

    settings = Settings(launch_mode=mode)

    channel = env.get("CATALOGSYNC_BROWSER_CHANNEL", "").strip()
    if channel:
        settings.browser_channel = channel

    executable = env.get("CATALOGSYNC_EXECUTABLE_PATH", "").strip()
    if executable:
        settings.executable_path = executable

    campus = env.get("CATALOGSYNC_CAMPUS", "").strip()
    if campus:
        settings.campus = campus

    cache_dir = env.get("CATALOGSYNC_CACHE_DIR", "").strip()
    if cache_dir:
        settings.cache_dir = Path(cache_dir)

    schedule_path = env.get("CATALOGSYNC_SCHEDULE_PATH", "").strip()
    if schedule_path:
        settings.schedule_path = Path(schedule_path)

    return settings
