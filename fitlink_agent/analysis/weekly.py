"""
Weekly insights: sleep regularity, training progression and stress day counts.
"""

from typing import List, Sequence

from fitlink_agent.analysis.primitives import baseline, consistency_score, positive_values
from fitlink_agent.models import (
    ActivitySample,
    PerformanceMarkers,
    SleepSample,
    StressIndicators,
    WeeklyInsights,
)

WEEKLY_SLEEP_WINDOW = 7
WEEKLY_ACTIVITY_WINDOW = 14
WEEK_DAYS = 7

# Progression policy cutoffs
OVERREACHING_TSS = 400
OVERREACHING_SESSIONS = 6
BUILDING_TSS = 200
BUILDING_MIN_SESSIONS = 4
RECOVERING_MAX_SESSIONS = 2

POOR_HRV_RATIO = 0.9
ELEVATED_RHR_RATIO = 1.05
QUALITY_SESSION_TSS = 50
HRV_IMPROVEMENT_RATIO = 1.1


def classify_training_progression(weekly_tss: float, session_count: int) -> str:
    if weekly_tss > OVERREACHING_TSS and session_count > OVERREACHING_SESSIONS:
        return "overreaching"
    if weekly_tss > BUILDING_TSS and session_count >= BUILDING_MIN_SESSIONS:
        return "building"
    if session_count <= RECOVERING_MAX_SESSIONS:
        return "recovering"
    return "maintaining"


def adaptation_signals(hrv_values: Sequence[float]) -> List[str]:
    """Signals from a newest-first HRV series."""
    signals = []

    if len(hrv_values) >= 7:
        recent = sum(hrv_values[0:3]) / 3
        older = sum(hrv_values[4:7]) / 3
        if recent > older * HRV_IMPROVEMENT_RATIO:
            signals.append("Positive adaptation - HRV improving")

    # Three nights in a row, each lower than the night before
    if len(hrv_values) >= 3 and hrv_values[0] < hrv_values[1] < hrv_values[2]:
        signals.append("Consistent HRV decline over 3 days")

    return signals


def analyze_weekly_insights(
    sleep: Sequence[SleepSample],
    activities: Sequence[ActivitySample],
) -> WeeklyInsights:
    """Analyze the newest week of sleep and two weeks of activities (newest-first)."""
    week_sleep = list(sleep[:WEEKLY_SLEEP_WINDOW])
    week_activities = list(activities[:WEEKLY_ACTIVITY_WINDOW])

    durations = positive_values(s.total_sleep_minutes for s in week_sleep)
    hrv_values = positive_values(s.hrv_avg for s in week_sleep)
    rhr_values = positive_values(s.resting_heart_rate for s in week_sleep)

    weekly_tss = sum(a.tss for a in week_activities)
    session_count = len(week_activities)

    hrv_baseline = baseline(hrv_values)
    rhr_baseline = baseline(rhr_values)

    return WeeklyInsights(
        sleep_consistency=consistency_score(durations),
        training_progression=classify_training_progression(weekly_tss, session_count),
        stress_indicators=StressIndicators(
            elevated_rhr_days=sum(1 for r in rhr_values if r > rhr_baseline * ELEVATED_RHR_RATIO),
            poor_hrv_days=sum(1 for h in hrv_values if h < hrv_baseline * POOR_HRV_RATIO),
        ),
        performance_markers=PerformanceMarkers(
            quality_sessions=sum(1 for a in week_activities if a.tss > QUALITY_SESSION_TSS),
            # Can go negative when the 14-activity window holds more than a week of sessions
            recovery_days=WEEK_DAYS - session_count,
        ),
        adaptation_signals=adaptation_signals(hrv_values),
    )
