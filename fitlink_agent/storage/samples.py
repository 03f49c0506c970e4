"""
Per-user sleep and activity sample storage.

Each user gets a directory under SAMPLES_DIR with two JSON files keyed for
upserts: sleep.json by wake date, activities.json by external id (or start
time when the provider gave none).
"""

import json
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from fitlink_agent.config import SAMPLES_DIR, SAMPLE_RETENTION_DAYS, logger
from fitlink_agent.models import ActivitySample, SleepSample


def _user_dir(user_id: str) -> Path:
    user_dir = SAMPLES_DIR / str(user_id)
    user_dir.mkdir(parents=True, exist_ok=True)
    return user_dir


def _read(path: Path) -> Dict[str, dict]:
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            return json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Could not read {path}: {e}")
        return {}


def _write(path: Path, records: Dict[str, dict]):
    with open(path, "w") as f:
        json.dump(records, f, indent=2, sort_keys=True)


def activity_key(activity: ActivitySample) -> str:
    """Upsert key for an activity."""
    return activity.external_id or activity.start_time.isoformat()


def save_sleep_samples(user_id: str, samples: Iterable[SleepSample]) -> int:
    """Upsert sleep samples by date. Returns the number of samples written."""
    path = _user_dir(user_id) / "sleep.json"
    records = _read(path)

    count = 0
    for sample in samples:
        records[sample.date.isoformat()] = sample.model_dump(mode="json")
        count += 1

    _write(path, records)
    return count


def save_activity_samples(user_id: str, samples: Iterable[ActivitySample]) -> int:
    """Upsert activities by external id. Returns the number of samples written."""
    path = _user_dir(user_id) / "activities.json"
    records = _read(path)

    count = 0
    for sample in samples:
        records[activity_key(sample)] = sample.model_dump(mode="json")
        count += 1

    _write(path, records)
    return count


def load_sleep_samples(
    user_id: str,
    days: Optional[int] = None,
    today: Optional[date] = None,
) -> List[SleepSample]:
    """Load sleep samples newest-first, optionally limited to the last N days before ``today``."""
    records = _read(_user_dir(user_id) / "sleep.json")

    samples = []
    for key, record in records.items():
        try:
            samples.append(SleepSample.model_validate(record))
        except ValidationError as e:
            logger.warning(f"Skipping invalid sleep record {key} for user {user_id}: {e}")

    if days is not None and today is not None:
        cutoff = today - timedelta(days=days)
        samples = [s for s in samples if s.date >= cutoff]

    samples.sort(key=lambda s: s.date, reverse=True)
    return samples


def load_activity_samples(
    user_id: str,
    days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> List[ActivitySample]:
    """Load activities newest-first, optionally limited to the last N days before ``now``."""
    records = _read(_user_dir(user_id) / "activities.json")

    samples = []
    for key, record in records.items():
        try:
            samples.append(ActivitySample.model_validate(record))
        except ValidationError as e:
            logger.warning(f"Skipping invalid activity record {key} for user {user_id}: {e}")

    if days is not None and now is not None:
        cutoff = now - timedelta(days=days)
        samples = [s for s in samples if s.start_time >= cutoff]

    samples.sort(key=lambda s: s.start_time, reverse=True)
    return samples


def prune_samples(user_id: str, today: date, retention_days: int = SAMPLE_RETENTION_DAYS) -> int:
    """Drop samples older than the retention window. Returns the number removed."""
    cutoff = (today - timedelta(days=retention_days)).isoformat()
    user_dir = _user_dir(user_id)
    removed = 0

    sleep_path = user_dir / "sleep.json"
    sleep = _read(sleep_path)
    kept_sleep = {k: v for k, v in sleep.items() if v.get("date", k) >= cutoff}
    removed += len(sleep) - len(kept_sleep)
    if sleep:
        _write(sleep_path, kept_sleep)

    activity_path = user_dir / "activities.json"
    activities = _read(activity_path)
    kept_activities = {
        k: v for k, v in activities.items()
        if v.get("start_time", "")[:10] >= cutoff
    }
    removed += len(activities) - len(kept_activities)
    if activities:
        _write(activity_path, kept_activities)

    if removed > 0:
        logger.info(f"Pruned {removed} samples older than {cutoff} for user {user_id}")
    return removed
