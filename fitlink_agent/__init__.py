"""
Fitlink Agent Package

Re-exports the public functions used by modal_agent.py and the tests.
"""

# Config and constants
from fitlink_agent.config import (
    DATA_DIR,
    SAMPLES_DIR,
    BRIEFS_DIR,
    USERS_FILE,
    OURA_API_BASE,
    STRAVA_API_BASE,
    CLAUDE_MODEL,
    DEFAULT_LOOKBACK_DAYS,
    UTC_TZ,
    logger,
)

# Models
from fitlink_agent.models import (
    SleepSample,
    ActivitySample,
    UserProfile,
    HealthSummary,
    TodaysConditions,
    Briefing,
)

# Utilities
from fitlink_agent.utils import (
    now_utc,
    ensure_directories,
    prune_old_data,
    local_hour,
    is_briefing_due,
)

# Prompt loading
from fitlink_agent.prompts import (
    get_prompts_dir,
    load_prompt,
    briefing_system_prompt,
)

# Health-trend summarization
from fitlink_agent.analysis import (
    InvalidSeriesError,
    summarize_health,
)

# Provider APIs
from fitlink_agent.api.oura import (
    fetch_oura_data,
    get_oura_sleep_range,
)
from fitlink_agent.api.strava import fetch_strava_activities
from fitlink_agent.api.weather import get_todays_conditions

# Sample extraction
from fitlink_agent.extraction.samples import (
    sleep_samples_from_oura,
    activity_from_strava,
    sleep_sample_from_row,
    activity_sample_from_row,
)

# Storage
from fitlink_agent.storage.samples import (
    save_sleep_samples,
    save_activity_samples,
    load_sleep_samples,
    load_activity_samples,
    prune_samples,
)
from fitlink_agent.storage.users import (
    load_users,
    get_user,
    upsert_user,
    pause_user,
    set_location,
    get_active_users,
    user_profile,
)
from fitlink_agent.storage.briefs import (
    save_brief,
    has_brief_for_date,
    load_recent_briefs,
)

# Telegram client
from fitlink_agent.telegram.client import send_telegram

# Claude briefing
from fitlink_agent.claude.briefing import (
    BriefingFormatError,
    build_briefing_prompt,
    generate_briefing_with_claude,
    format_briefing_message,
)

__all__ = [
    # Config
    "DATA_DIR",
    "SAMPLES_DIR",
    "BRIEFS_DIR",
    "USERS_FILE",
    "OURA_API_BASE",
    "STRAVA_API_BASE",
    "CLAUDE_MODEL",
    "DEFAULT_LOOKBACK_DAYS",
    "UTC_TZ",
    "logger",
    # Models
    "SleepSample",
    "ActivitySample",
    "UserProfile",
    "HealthSummary",
    "TodaysConditions",
    "Briefing",
    # Utils
    "now_utc",
    "ensure_directories",
    "prune_old_data",
    "local_hour",
    "is_briefing_due",
    # Prompts
    "get_prompts_dir",
    "load_prompt",
    "briefing_system_prompt",
    # Analysis
    "InvalidSeriesError",
    "summarize_health",
    # Provider APIs
    "fetch_oura_data",
    "get_oura_sleep_range",
    "fetch_strava_activities",
    "get_todays_conditions",
    # Extraction
    "sleep_samples_from_oura",
    "activity_from_strava",
    "sleep_sample_from_row",
    "activity_sample_from_row",
    # Storage - samples
    "save_sleep_samples",
    "save_activity_samples",
    "load_sleep_samples",
    "load_activity_samples",
    "prune_samples",
    # Storage - users
    "load_users",
    "get_user",
    "upsert_user",
    "pause_user",
    "set_location",
    "get_active_users",
    "user_profile",
    # Storage - briefs
    "save_brief",
    "has_brief_for_date",
    "load_recent_briefs",
    # Telegram
    "send_telegram",
    # Claude
    "BriefingFormatError",
    "build_briefing_prompt",
    "generate_briefing_with_claude",
    "format_briefing_message",
]
