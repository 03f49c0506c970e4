"""
Utility functions for Fitlink Agent.
"""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fitlink_agent.config import (
    UTC_TZ,
    SAMPLES_DIR,
    BRIEFS_DIR,
    BRIEF_RETENTION_DAYS,
    logger,
)


def now_utc() -> datetime:
    """Get current time in UTC."""
    return datetime.now(UTC_TZ)


def ensure_directories():
    """Create data directories if they don't exist."""
    for dir_path in [SAMPLES_DIR, BRIEFS_DIR]:
        dir_path.mkdir(parents=True, exist_ok=True)


def user_local_time(now: datetime, timezone: str) -> datetime:
    """Convert an aware datetime to the user's timezone, falling back to UTC."""
    try:
        return now.astimezone(ZoneInfo(timezone))
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Invalid timezone {timezone}, using UTC")
        return now.astimezone(UTC_TZ)


def local_hour(now: datetime, timezone: str) -> int:
    """Hour of day for the user, used to match their briefing hour."""
    return user_local_time(now, timezone).hour


def is_briefing_due(user: dict, now: datetime) -> bool:
    """
    Check whether a user's daily briefing should go out at ``now``.

    A briefing is due when the user is active, their local hour equals their
    briefing hour, they are not paused, and no brief was logged for their
    local date yet.
    """
    from fitlink_agent.config import DEFAULT_BRIEFING_HOUR, DEFAULT_TIMEZONE
    from fitlink_agent.storage.briefs import has_brief_for_date

    if not user.get("is_active", True):
        return False

    timezone = user.get("timezone") or DEFAULT_TIMEZONE
    if local_hour(now, timezone) != user.get("briefing_hour", DEFAULT_BRIEFING_HOUR):
        return False

    paused_until = user.get("paused_until")
    if paused_until:
        pause_end = datetime.fromisoformat(paused_until)
        if pause_end.tzinfo is None:
            pause_end = pause_end.replace(tzinfo=UTC_TZ)
        if pause_end >= now:
            logger.info(f"User {user['id']} briefings paused until {paused_until}")
            return False

    today = user_local_time(now, timezone).strftime("%Y-%m-%d")
    if has_brief_for_date(user["id"], today):
        logger.info(f"Briefing already sent today for user {user['id']}")
        return False

    return True


def prune_old_data():
    """Remove briefs older than the retention window."""
    cutoff_str = (now_utc() - timedelta(days=BRIEF_RETENTION_DAYS)).strftime("%Y-%m-%d")

    pruned_count = 0
    for brief_file in BRIEFS_DIR.glob("*/*.json"):
        if brief_file.stem < cutoff_str:
            brief_file.unlink()
            pruned_count += 1

    if pruned_count > 0:
        logger.info(f"Pruned {pruned_count} briefs older than {cutoff_str}")
