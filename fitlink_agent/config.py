"""
Configuration constants and logging setup for Fitlink Agent.
"""

import logging
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv


def _load_local_env():
    """Load .env file for local development (skipped on Modal)."""
    env_file = Path(__file__).parent.parent / ".env"
    if env_file.exists():
        load_dotenv(env_file)


_load_local_env()

# Logging configuration
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("fitlink_agent")

UTC_TZ = ZoneInfo("UTC")
DEFAULT_TIMEZONE = "UTC"

# Data directories (Modal volume paths)
DATA_DIR = Path("/data")
SAMPLES_DIR = DATA_DIR / "samples"
BRIEFS_DIR = DATA_DIR / "briefs"
USERS_FILE = DATA_DIR / "users.json"

# API configuration
OURA_API_BASE = "https://api.ouraring.com/v2/usercollection"
STRAVA_API_BASE = "https://www.strava.com/api/v3"
TELEGRAM_API_BASE = "https://api.telegram.org"
OPEN_METEO_FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
OPEN_METEO_GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"

# Claude model
CLAUDE_MODEL = "claude-sonnet-4-5"

# Analysis and retention windows
DEFAULT_LOOKBACK_DAYS = 30
SAMPLE_RETENTION_DAYS = 90
BRIEF_RETENTION_DAYS = 28
SYNC_DAYS_BACK = 2  # yesterday + today
MAX_SYNC_DAYS_BACK = 30

# Briefing schedule defaults
DEFAULT_BRIEFING_HOUR = 7
