"""Storage modules for samples, users, and briefs."""

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

__all__ = [
    # Samples
    "save_sleep_samples",
    "save_activity_samples",
    "load_sleep_samples",
    "load_activity_samples",
    "prune_samples",
    # Users
    "load_users",
    "get_user",
    "upsert_user",
    "pause_user",
    "set_location",
    "get_active_users",
    "user_profile",
    # Briefs
    "save_brief",
    "has_brief_for_date",
    "load_recent_briefs",
]
