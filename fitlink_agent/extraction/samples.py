"""
Conversion of provider payloads and stored rows into typed samples.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from fitlink_agent.analysis.primitives import round_half_up
from fitlink_agent.models import ActivitySample, SleepSample

STRAVA_TYPE_MAP = {
    "Run": "run",
    "Ride": "ride",
    "Swim": "swim",
    "Walk": "walk",
    "Hike": "hike",
}

# Column names used by older rows, in lookup order after the canonical name
SLEEP_ALIASES = {
    "sleep_efficiency": ("efficiency",),
    "hrv_avg": ("heart_rate_variability", "hrv_average", "average_hrv"),
    "resting_heart_rate": ("lowest_heart_rate", "heart_rate_average"),
}
TSS_ALIASES = ("tss_estimated", "training_stress_score", "suffer_score")


def _first(row: Dict[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None


def _as_utc(value: datetime) -> datetime:
    """Read naive timestamps as UTC so they order against provider times."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _minutes(seconds: Optional[float]) -> Optional[float]:
    if seconds is None:
        return None
    return round_half_up(seconds / 60)


def sleep_samples_from_oura(sessions: List[dict], readiness: List[dict]) -> List[SleepSample]:
    """
    Build one SleepSample per wake date from Oura sleep sessions and readiness.

    Only main sleeps count. When a wake date has several, the latest-ending
    one wins. Readiness is joined on its ``day``. Returned newest first.
    """
    readiness_by_day = {r.get("day"): r for r in readiness if r.get("day")}

    latest: Dict[str, dict] = {}
    for session in sessions:
        # Naps and short fragments never stand in for the main sleep
        if session.get("type", "long_sleep") != "long_sleep":
            continue
        wake_day = (session.get("bedtime_end") or "")[:10]
        if not wake_day:
            continue
        current = latest.get(wake_day)
        if current is None or session.get("bedtime_end", "") > current.get("bedtime_end", ""):
            latest[wake_day] = session

    samples = []
    for wake_day, session in latest.items():
        day_readiness = readiness_by_day.get(wake_day, {})
        samples.append(SleepSample(
            date=date.fromisoformat(wake_day),
            sleep_efficiency=session.get("efficiency"),
            total_sleep_minutes=_minutes(session.get("total_sleep_duration")),
            hrv_avg=session.get("average_hrv"),
            resting_heart_rate=session.get("lowest_heart_rate"),
            temperature_deviation=day_readiness.get("temperature_deviation"),
            readiness_score=day_readiness.get("score"),
            bedtime_start=_parse_datetime(session.get("bedtime_start")),
        ))

    samples.sort(key=lambda s: s.date, reverse=True)
    return samples


def activity_from_strava(activity: dict) -> ActivitySample:
    """Map a Strava activity summary onto an ActivitySample (no TSS available)."""
    return ActivitySample(
        start_time=_parse_datetime(activity.get("start_date")),
        duration_seconds=activity.get("elapsed_time") or 0,
        distance_meters=activity.get("distance"),
        tss_estimated=None,
        external_id=str(activity["id"]) if activity.get("id") is not None else None,
        activity_type=STRAVA_TYPE_MAP.get(activity.get("type"), "other"),
        name=activity.get("name"),
    )


def sleep_sample_from_row(row: Dict[str, Any]) -> SleepSample:
    """Build a SleepSample from a loosely typed row, accepting legacy column names."""
    values = {
        field: _first(row, (field,) + aliases)
        for field, aliases in SLEEP_ALIASES.items()
    }
    bedtime = row.get("bedtime_start")
    return SleepSample(
        date=row["date"],
        total_sleep_minutes=row.get("total_sleep_minutes"),
        temperature_deviation=row.get("temperature_deviation"),
        readiness_score=row.get("readiness_score"),
        bedtime_start=_parse_datetime(bedtime) if isinstance(bedtime, str) else bedtime,
        **values,
    )


def activity_sample_from_row(row: Dict[str, Any]) -> ActivitySample:
    """Build an ActivitySample from a loosely typed row, accepting legacy TSS columns."""
    start = row["start_time"]
    if isinstance(start, str):
        start = _parse_datetime(start)
    activity_type = row.get("activity_type")
    return ActivitySample(
        start_time=_as_utc(start) if isinstance(start, datetime) else start,
        duration_seconds=row.get("duration_seconds") or 0,
        distance_meters=row.get("distance_meters"),
        tss_estimated=_first(row, TSS_ALIASES),
        external_id=str(row["external_id"]) if row.get("external_id") is not None else None,
        activity_type=activity_type if activity_type in STRAVA_TYPE_MAP.values() else "other",
        name=row.get("name"),
    )
