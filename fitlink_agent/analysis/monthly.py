"""
Monthly patterns over the full lookback window (~30 days).

Detects seasonal and lifestyle habits, counts training blocks against
recovery weeks, correlates sleep with training and HRV with RHR, and fits
long-term slopes to HRV and RHR.
"""

import math
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence

from fitlink_agent.analysis.primitives import (
    consistency_score,
    correlation,
    long_term_slope,
    positive_values,
    round_half_up,
)
from fitlink_agent.models import (
    ActivitySample,
    AdaptationCycles,
    BaselineShifts,
    HealthCorrelations,
    MonthlyPatterns,
    SleepSample,
)

MIN_SAMPLES = 7
SEASONAL_SLICE = 10
SLEEP_SHIFT_MINUTES = 30
WEEKEND_ACTIVITY_SHARE = 0.4
SHORT_SESSION_SECONDS = 2400  # 40 min

TRAINING_BLOCK_SESSIONS = 4
TRAINING_BLOCK_TSS = 200
RECOVERY_MAX_SESSIONS = 2
RECOVERY_MAX_TSS = 100

MIN_BEDTIMES = 5
CONSISTENT_BEDTIME_SCORE = 80
VARIABLE_BEDTIME_SCORE = 60
WEEKEND_CATCH_UP_MINUTES = 60
TIME_PREFERENCE_RATIO = 1.5
WORKOUT_DENSITY = 0.5

SATURDAY = 5


def _is_weekend(day: date) -> bool:
    return day.weekday() >= SATURDAY


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def week_start(day: date) -> date:
    """Sunday that opens the week containing ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _elapsed_days(reference: datetime, oldest: datetime) -> int:
    # Compare wall-clock times when only one side carries a timezone
    if (reference.tzinfo is None) != (oldest.tzinfo is None):
        reference = reference.replace(tzinfo=None)
        oldest = oldest.replace(tzinfo=None)
    return math.ceil((reference - oldest).total_seconds() / 86400)


def seasonal_trends(
    sleep: Sequence[SleepSample],
    activities: Sequence[ActivitySample],
) -> List[str]:
    patterns = []

    if sleep:
        recent = [s.total_sleep_minutes or 0 for s in sleep[:SEASONAL_SLICE]]
        older = [s.total_sleep_minutes or 0 for s in sleep[-SEASONAL_SLICE:]]
        recent_avg = _mean(recent)
        older_avg = _mean(older)
        if recent_avg > older_avg + SLEEP_SHIFT_MINUTES:
            patterns.append("Increased sleep need (seasonal/stress)")
        if recent_avg < older_avg - SLEEP_SHIFT_MINUTES:
            patterns.append("Reduced sleep duration trend")

    if activities:
        weekend = [a for a in activities if _is_weekend(a.start_time.date())]
        if len(weekend) > len(activities) * WEEKEND_ACTIVITY_SHARE:
            patterns.append("Weekend warrior pattern")

        avg_duration = _mean([a.duration_seconds or 0 for a in activities])
        if avg_duration < SHORT_SESSION_SECONDS:
            patterns.append("Short indoor session preference")

    return patterns or ["Consistent activity patterns"]


def adaptation_cycles(activities: Sequence[ActivitySample]) -> AdaptationCycles:
    """Count training-block weeks and recovery weeks (weeks start on Sunday)."""
    if len(activities) < MIN_SAMPLES:
        return AdaptationCycles()

    weeks: Dict[date, List[ActivitySample]] = defaultdict(list)
    for activity in activities:
        weeks[week_start(activity.start_time.date())].append(activity)

    training_blocks = 0
    recovery_phases = 0
    for week_activities in weeks.values():
        weekly_tss = sum(a.tss for a in week_activities)
        sessions = len(week_activities)
        if sessions >= TRAINING_BLOCK_SESSIONS or weekly_tss > TRAINING_BLOCK_TSS:
            training_blocks += 1
        elif sessions <= RECOVERY_MAX_SESSIONS and weekly_tss < RECOVERY_MAX_TSS:
            recovery_phases += 1

    return AdaptationCycles(training_blocks=training_blocks, recovery_phases=recovery_phases)


def health_correlations(
    sleep: Sequence[SleepSample],
    activities: Sequence[ActivitySample],
) -> HealthCorrelations:
    if len(sleep) < MIN_SAMPLES or len(activities) < MIN_SAMPLES:
        return HealthCorrelations()

    tss_by_day: Dict[date, float] = defaultdict(float)
    for activity in activities:
        tss_by_day[activity.start_time.date()] += activity.tss

    efficiencies = [s.sleep_efficiency or 0 for s in sleep]
    same_day_tss = [tss_by_day.get(s.date, 0) for s in sleep]

    # Only nights that report both HRV and RHR can be paired
    paired = [
        (s.hrv_avg, -s.resting_heart_rate)
        for s in sleep
        if s.hrv_avg and s.hrv_avg > 0 and s.resting_heart_rate and s.resting_heart_rate > 0
    ]
    stress_recovery = 0.0
    if len(paired) >= MIN_SAMPLES:
        hrv = [p[0] for p in paired]
        negated_rhr = [p[1] for p in paired]
        stress_recovery = round_half_up(correlation(hrv, negated_rhr), 2)

    return HealthCorrelations(
        sleep_training=round_half_up(correlation(efficiencies, same_day_tss), 2),
        stress_recovery=stress_recovery,
    )


def lifestyle_patterns(
    sleep: Sequence[SleepSample],
    activities: Sequence[ActivitySample],
    as_of: Optional[datetime] = None,
) -> List[str]:
    patterns = []

    if len(sleep) >= MIN_SAMPLES:
        bedtimes = [
            s.bedtime_start.hour + s.bedtime_start.minute / 60
            for s in sleep
            if s.bedtime_start
        ]
        if len(bedtimes) >= MIN_BEDTIMES:
            score = consistency_score(bedtimes)
            if score > CONSISTENT_BEDTIME_SCORE:
                patterns.append("Consistent bedtime routine")
            elif score < VARIABLE_BEDTIME_SCORE:
                patterns.append("Variable sleep schedule")

        weekday = [s.total_sleep_minutes or 0 for s in sleep if not _is_weekend(s.date)]
        weekend = [s.total_sleep_minutes or 0 for s in sleep if _is_weekend(s.date)]
        if weekday and weekend and _mean(weekend) > _mean(weekday) + WEEKEND_CATCH_UP_MINUTES:
            patterns.append("Weekend sleep catch-up pattern")

    if len(activities) >= MIN_SAMPLES:
        morning = sum(1 for a in activities if 5 <= a.start_time.hour < 12)
        evening = sum(1 for a in activities if 17 <= a.start_time.hour < 22)
        if morning > evening * TIME_PREFERENCE_RATIO:
            patterns.append("Morning exercise preference")
        elif evening > morning * TIME_PREFERENCE_RATIO:
            patterns.append("Evening exercise preference")

        workout_days = len({a.start_time.date() for a in activities})
        reference = as_of or activities[0].start_time
        total_days = _elapsed_days(reference, activities[-1].start_time)
        if total_days > 0 and workout_days / total_days > WORKOUT_DENSITY:
            patterns.append("High exercise consistency")

    return patterns or ["Developing routine"]


def analyze_monthly_patterns(
    sleep: Sequence[SleepSample],
    activities: Sequence[ActivitySample],
    as_of: Optional[datetime] = None,
) -> MonthlyPatterns:
    """
    Analyze the whole lookback window (both inputs newest-first).

    ``as_of`` anchors the workout-density check; without it the newest
    activity's start time is used, so the result never depends on the clock.
    """
    hrv_values = positive_values(s.hrv_avg for s in sleep)
    rhr_values = positive_values(s.resting_heart_rate for s in sleep)

    return MonthlyPatterns(
        seasonal_trends=seasonal_trends(sleep, activities),
        adaptation_cycles=adaptation_cycles(activities),
        health_correlations=health_correlations(sleep, activities),
        baseline_shifts=BaselineShifts(
            hrv_trend=long_term_slope(hrv_values),
            rhr_trend=long_term_slope(rhr_values),
        ),
        lifestyle_patterns=lifestyle_patterns(sleep, activities, as_of),
    )
