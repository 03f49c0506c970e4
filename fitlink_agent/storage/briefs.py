"""
Briefing log storage.

One JSON file per user per local date: BRIEFS_DIR/<user_id>/<YYYY-MM-DD>.json.
The file's existence is what marks a briefing as already sent.
"""

import json
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from fitlink_agent.config import BRIEFS_DIR, logger


def _brief_path(user_id: str, date_str: str) -> Path:
    return BRIEFS_DIR / str(user_id) / f"{date_str}.json"


def save_brief(user_id: str, date_str: str, content: str, data: Optional[dict] = None):
    """Log a sent briefing: the formatted message plus the structured briefing."""
    from fitlink_agent.utils import now_utc

    path = _brief_path(user_id, date_str)
    path.parent.mkdir(parents=True, exist_ok=True)

    entry = {
        "date": date_str,
        "sent_at": now_utc().isoformat(),
        "content": content,
        "data": data or {},
    }
    with open(path, "w") as f:
        json.dump(entry, f, indent=2)


def has_brief_for_date(user_id: str, date_str: str) -> bool:
    """Check if a briefing was already logged for this user and date."""
    return _brief_path(user_id, date_str).exists()


def load_recent_briefs(user_id: str, days: int = 3, today: Optional[date] = None) -> list:
    """Load the user's briefs from the N days before ``today``, newest first."""
    if today is None:
        from fitlink_agent.utils import now_utc
        today = now_utc().date()

    briefs = []
    for i in range(1, days + 1):
        date_str = (today - timedelta(days=i)).strftime("%Y-%m-%d")
        path = _brief_path(user_id, date_str)
        if not path.exists():
            continue
        try:
            with open(path) as f:
                briefs.append(json.load(f))
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Could not read brief {path}: {e}")
    return briefs
