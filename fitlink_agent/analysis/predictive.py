"""
Predictive flags: illness risk, overtraining risk and the next peak window.

Deterministic factor counting over the recent, weekly and monthly results.
"""

from typing import Optional

from fitlink_agent.models import (
    MonthlyPatterns,
    PredictiveFlags,
    RecentTrends,
    WeeklyInsights,
)


def _risk_level(factors: int, high: int, moderate: int) -> str:
    if factors >= high:
        return "high"
    if factors >= moderate:
        return "moderate"
    return "low"


def illness_factors(recent: RecentTrends, weekly: WeeklyInsights) -> int:
    return sum([
        recent.recovery_markers.rhr_change > 5,
        recent.recovery_markers.temp_deviation > 0.5,
        recent.hrv_pattern.trend < -20,
        recent.sleep_trend == "declining",
        weekly.stress_indicators.poor_hrv_days >= 3,
    ])


def overtraining_factors(recent: RecentTrends, weekly: WeeklyInsights) -> int:
    load = recent.training_load
    return sum([
        load.fatigue_score > 70,
        weekly.stress_indicators.poor_hrv_days >= 4,
        weekly.stress_indicators.elevated_rhr_days >= 3,
        recent.energy_pattern == "declining",
        weekly.training_progression == "overreaching",
        load.current > load.weekly_avg * 1.3,
    ])


def performance_factors(recent: RecentTrends, weekly: WeeklyInsights) -> int:
    return sum([
        recent.hrv_pattern.trend > 10,
        recent.training_load.fatigue_score < 40,
        recent.sleep_trend == "improving",
        recent.energy_pattern == "consistent",
        weekly.training_progression == "building",
        recent.recovery_markers.rhr_change < 2,
    ])


def peak_performance_window(factors: int) -> Optional[str]:
    if factors >= 5:
        return "next 2-3 days (optimal conditions)"
    if factors >= 4:
        return "next 3-5 days"
    if factors >= 3:
        return "next 5-7 days"
    return None


def generate_predictive_flags(
    recent: RecentTrends,
    weekly: WeeklyInsights,
    monthly: MonthlyPatterns,
) -> PredictiveFlags:
    """Combine the three windows into categorical flags.

    The monthly patterns are accepted so every window feeds the same call,
    but no current rule reads them.
    """
    return PredictiveFlags(
        illness_risk=_risk_level(illness_factors(recent, weekly), high=3, moderate=2),
        overtraining_risk=_risk_level(overtraining_factors(recent, weekly), high=4, moderate=2),
        peak_performance_window=peak_performance_window(performance_factors(recent, weekly)),
    )
