"""
Health summary entry point.

summarize_health() is the single surface shared by the daily briefing job and
the dashboard endpoint. It is pure: no clock reads, no I/O, and identical
input collections always produce an identical HealthSummary.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Optional, Sequence

from fitlink_agent.config import DEFAULT_LOOKBACK_DAYS
from fitlink_agent.analysis.monthly import analyze_monthly_patterns
from fitlink_agent.analysis.predictive import generate_predictive_flags
from fitlink_agent.analysis.recent import analyze_recent_trends
from fitlink_agent.analysis.weekly import analyze_weekly_insights
from fitlink_agent.models import (
    ActivitySample,
    HealthSummary,
    SleepSample,
    UserProfile,
)


def infer_experience_level(activities: Sequence[ActivitySample]) -> str:
    """Guess training experience from average load and the longest session."""
    if not activities:
        return "beginner"

    avg_tss = sum(a.tss for a in activities) / len(activities)
    longest = max(a.duration_seconds or 0 for a in activities)

    if avg_tss > 80 and longest > 7200:
        return "advanced"
    if avg_tss > 40 and longest > 3600:
        return "intermediate"
    return "beginner"


def _within_lookback(start_time: datetime, cutoff: datetime) -> bool:
    if (start_time.tzinfo is None) != (cutoff.tzinfo is None):
        return start_time.replace(tzinfo=None) >= cutoff.replace(tzinfo=None)
    return start_time >= cutoff


def summarize_health(
    sleep_samples: Sequence[SleepSample],
    activity_samples: Sequence[ActivitySample],
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    profile: Optional[UserProfile] = None,
    as_of: Optional[datetime] = None,
    parallel: bool = False,
) -> HealthSummary:
    """
    Build a HealthSummary from newest-first sleep and activity samples.

    Args:
        sleep_samples: At most one sample per date, newest first
        activity_samples: Workouts, newest first
        lookback_days: Size of the monthly window
        profile: Age/sex/goal of the user; experience level is always inferred
        as_of: Reference time for the monthly window. Samples older than
               ``lookback_days`` before it are dropped. Without it, sleep is
               only capped by count and activities are windowed from the
               newest activity.
        parallel: Run the weekly and monthly stages in a thread pool

    The inputs are re-sliced but never re-sorted.
    """
    sleep = list(sleep_samples)
    activities = list(activity_samples)

    if as_of is not None:
        sleep_cutoff = as_of - timedelta(days=lookback_days)
        sleep = [s for s in sleep if s.date >= sleep_cutoff.date()]
    if activities:
        reference = as_of or activities[0].start_time
        cutoff = reference - timedelta(days=lookback_days)
        activities = [a for a in activities if _within_lookback(a.start_time, cutoff)]
    sleep = sleep[:lookback_days]

    recent = analyze_recent_trends(sleep, activities)

    if parallel:
        with ThreadPoolExecutor(max_workers=2) as pool:
            weekly_future = pool.submit(analyze_weekly_insights, sleep, activities)
            monthly_future = pool.submit(analyze_monthly_patterns, sleep, activities, as_of)
            weekly = weekly_future.result()
            monthly = monthly_future.result()
    else:
        weekly = analyze_weekly_insights(sleep, activities)
        monthly = analyze_monthly_patterns(sleep, activities, as_of)

    base_profile = profile or UserProfile()
    user_profile = base_profile.model_copy(
        update={"experience_level": infer_experience_level(activities)}
    )

    return HealthSummary(
        user_profile=user_profile,
        recent=recent,
        weekly=weekly,
        monthly=monthly,
        predictive_flags=generate_predictive_flags(recent, weekly, monthly),
    )
