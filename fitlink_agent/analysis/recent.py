"""
Recent-window analysis: the last three nights of sleep and last seven workouts.
"""

from typing import List, Sequence

from fitlink_agent.analysis.primitives import (
    baseline,
    consistency_score,
    percent_trend,
    positive_values,
    round_half_up,
)
from fitlink_agent.models import (
    ActivitySample,
    HRVPattern,
    RecentTrends,
    RecoveryMarkers,
    SleepSample,
    TrainingLoad,
)

RECENT_SLEEP_WINDOW = 3
RECENT_ACTIVITY_WINDOW = 7

SLEEP_TREND_THRESHOLD = 5
HRV_RAPID_DECLINE_PCT = -15
HRV_VERY_LOW_MS = 20
ENERGY_DECLINE_PCT = -10
ENERGY_CONSISTENCY_MIN = 70


def classify_sleep_trend(trend: float) -> str:
    if trend > SLEEP_TREND_THRESHOLD:
        return "improving"
    if trend < -SLEEP_TREND_THRESHOLD:
        return "declining"
    return "stable"


def hrv_alerts(hrv_values: Sequence[float], trend: float) -> List[str]:
    """Alerts for a newest-first HRV series and its percent trend."""
    alerts = []
    if trend < HRV_RAPID_DECLINE_PCT:
        alerts.append("HRV declining rapidly - stress/fatigue warning")
    if hrv_values and hrv_values[0] < HRV_VERY_LOW_MS:
        alerts.append("Very low HRV detected")
    return alerts


def fatigue_score(tss: float, hrv_values: Sequence[float], rhr_values: Sequence[float]) -> int:
    """
    Mean of three sub-scores: load, HRV ratio and RHR ratio.

    Not clamped: ratios above 2 push the result past 100, and the
    overtraining threshold (> 70) is tuned against the unclamped value.
    """
    load_score = min(100, tss / 5)
    hrv_score = (hrv_values[0] / baseline(hrv_values)) * 50 if hrv_values else 50
    rhr_score = (baseline(rhr_values) / rhr_values[0]) * 50 if rhr_values else 50
    return int(round_half_up((load_score + hrv_score + rhr_score) / 3))


def energy_pattern(sleep: Sequence[SleepSample]) -> str:
    """Classify readiness over the window as consistent, variable or declining."""
    readiness = positive_values(s.readiness_score for s in sleep)
    if len(readiness) < 2:
        return "consistent"
    if percent_trend(readiness) < ENERGY_DECLINE_PCT:
        return "declining"
    if consistency_score(readiness) < ENERGY_CONSISTENCY_MIN:
        return "variable"
    return "consistent"


def analyze_recent_trends(
    sleep: Sequence[SleepSample],
    activities: Sequence[ActivitySample],
) -> RecentTrends:
    """Analyze the newest sleep samples and activities (both newest-first)."""
    recent_sleep = list(sleep[:RECENT_SLEEP_WINDOW])
    recent_activities = list(activities[:RECENT_ACTIVITY_WINDOW])

    if not recent_sleep:
        return RecentTrends()

    efficiencies = [s.sleep_efficiency or 0 for s in recent_sleep]
    hrv_values = positive_values(s.hrv_avg for s in recent_sleep)
    rhr_values = positive_values(s.resting_heart_rate for s in recent_sleep)

    hrv_trend = percent_trend(hrv_values)
    total_tss = sum(a.tss for a in recent_activities)

    return RecentTrends(
        sleep_trend=classify_sleep_trend(percent_trend(efficiencies)),
        hrv_pattern=HRVPattern(
            avg=baseline(hrv_values),
            trend=hrv_trend,
            alerts=hrv_alerts(hrv_values, hrv_trend),
        ),
        # No longer-term baseline exists at this granularity, so the weekly
        # average mirrors the current load.
        training_load=TrainingLoad(
            current=total_tss,
            weekly_avg=total_tss,
            fatigue_score=fatigue_score(total_tss, hrv_values, rhr_values),
        ),
        recovery_markers=RecoveryMarkers(
            rhr_change=rhr_values[0] - rhr_values[1] if len(rhr_values) >= 2 else 0,
            temp_deviation=recent_sleep[0].temperature_deviation or 0,
        ),
        energy_pattern=energy_pattern(recent_sleep),
    )
