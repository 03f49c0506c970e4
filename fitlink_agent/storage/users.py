"""
User registry.

All users live in a single JSON object keyed by user id. A record carries the
Telegram chat, timezone, briefing hour, pause state, profile fields, an
optional weather location and optional per-user provider tokens.
"""

import json
from datetime import datetime
from typing import List, Optional

from fitlink_agent.config import (
    USERS_FILE,
    DEFAULT_BRIEFING_HOUR,
    DEFAULT_TIMEZONE,
    logger,
)
from fitlink_agent.models import UserProfile

# Profile keys a stored user record may carry
PROFILE_FIELDS = ("age", "sex", "training_goal")


def load_users() -> dict:
    """Load all user records, keyed by user id."""
    if not USERS_FILE.exists():
        return {}
    try:
        with open(USERS_FILE) as f:
            return json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Could not read users file: {e}")
        return {}


def _save_users(users: dict):
    USERS_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(USERS_FILE, "w") as f:
        json.dump(users, f, indent=2, sort_keys=True)


def get_user(user_id: str) -> Optional[dict]:
    return load_users().get(str(user_id))


def upsert_user(user_id: str, **fields) -> dict:
    """Create or update a user record. New users get default schedule fields."""
    users = load_users()
    user_id = str(user_id)

    user = users.get(user_id) or {
        "id": user_id,
        "timezone": DEFAULT_TIMEZONE,
        "briefing_hour": DEFAULT_BRIEFING_HOUR,
        "is_active": True,
        "paused_until": None,
    }
    user.update(fields)
    user["id"] = user_id

    users[user_id] = user
    _save_users(users)
    return user


def pause_user(user_id: str, until: Optional[datetime]) -> Optional[dict]:
    """Pause briefings until ``until``; pass None to resume."""
    if get_user(user_id) is None:
        logger.warning(f"Cannot pause unknown user {user_id}")
        return None
    return upsert_user(user_id, paused_until=until.isoformat() if until else None)


def set_location(user_id: str, city: str, latitude: Optional[float] = None, longitude: Optional[float] = None) -> Optional[dict]:
    """Store the city used for weather; coordinates are resolved from it when omitted."""
    if get_user(user_id) is None:
        logger.warning(f"Cannot set location for unknown user {user_id}")
        return None
    return upsert_user(user_id, location={"city": city, "latitude": latitude, "longitude": longitude})


def get_active_users() -> List[dict]:
    return [u for u in load_users().values() if u.get("is_active", True)]


def user_profile(user: dict) -> UserProfile:
    """Build the analysis profile from a user record, ignoring missing fields."""
    fields = {k: user[k] for k in PROFILE_FIELDS if user.get(k) is not None}
    return UserProfile(**fields)
