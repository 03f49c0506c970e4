"""
Typed sample and summary models.

Samples are built once at the data-access boundary (see extraction.samples)
and are immutable. The derived models are recomputed on every call to
summarize_health() and carry no reference back to the samples.
"""

import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


SleepTrend = Literal["declining", "stable", "improving", "no_data"]
EnergyPattern = Literal["consistent", "variable", "declining", "unknown"]
TrainingProgression = Literal["building", "maintaining", "recovering", "overreaching"]
RiskLevel = Literal["low", "moderate", "high"]
ExperienceLevel = Literal["beginner", "intermediate", "advanced"]
ActivityType = Literal["run", "ride", "swim", "walk", "hike", "other"]
ExerciseConditions = Literal["excellent", "good", "fair", "poor"]


# ============================================================================
# Input samples
# ============================================================================

class SleepSample(BaseModel):
    """One calendar day's sleep record (keyed by wake date)."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    sleep_efficiency: Optional[float] = None
    total_sleep_minutes: Optional[float] = None
    hrv_avg: Optional[float] = None
    resting_heart_rate: Optional[float] = None
    temperature_deviation: Optional[float] = None
    readiness_score: Optional[float] = None
    bedtime_start: Optional[dt.datetime] = None


class ActivitySample(BaseModel):
    """One recorded workout. Several per day are allowed."""

    model_config = ConfigDict(frozen=True)

    start_time: dt.datetime
    duration_seconds: float = 0
    distance_meters: Optional[float] = None
    tss_estimated: Optional[float] = None
    # Descriptive fields, only used when rendering briefings
    external_id: Optional[str] = None
    activity_type: ActivityType = "other"
    name: Optional[str] = None

    @property
    def tss(self) -> float:
        """Training stress with absent values counted as zero."""
        return self.tss_estimated or 0


# ============================================================================
# Recent window (last 1-3 days)
# ============================================================================

class HRVPattern(BaseModel):
    avg: float = 0
    trend: float = 0
    alerts: List[str] = Field(default_factory=list)


class TrainingLoad(BaseModel):
    current: float = 0
    weekly_avg: float = 0
    fatigue_score: int = 0


class RecoveryMarkers(BaseModel):
    rhr_change: float = 0
    temp_deviation: float = 0


class RecentTrends(BaseModel):
    sleep_trend: SleepTrend = "no_data"
    hrv_pattern: HRVPattern = Field(default_factory=HRVPattern)
    training_load: TrainingLoad = Field(default_factory=TrainingLoad)
    recovery_markers: RecoveryMarkers = Field(default_factory=RecoveryMarkers)
    energy_pattern: EnergyPattern = "unknown"


# ============================================================================
# Weekly window (last 7-14 days)
# ============================================================================

class StressIndicators(BaseModel):
    elevated_rhr_days: int = 0
    poor_hrv_days: int = 0


class PerformanceMarkers(BaseModel):
    quality_sessions: int = 0
    recovery_days: int = 0


class WeeklyInsights(BaseModel):
    sleep_consistency: float = 100
    training_progression: TrainingProgression = "maintaining"
    stress_indicators: StressIndicators = Field(default_factory=StressIndicators)
    performance_markers: PerformanceMarkers = Field(default_factory=PerformanceMarkers)
    adaptation_signals: List[str] = Field(default_factory=list)


# ============================================================================
# Monthly window (last ~30 days)
# ============================================================================

class AdaptationCycles(BaseModel):
    training_blocks: int = 0
    recovery_phases: int = 0


class HealthCorrelations(BaseModel):
    sleep_training: float = 0
    stress_recovery: float = 0


class BaselineShifts(BaseModel):
    hrv_trend: float = 0
    rhr_trend: float = 0


class MonthlyPatterns(BaseModel):
    seasonal_trends: List[str] = Field(default_factory=list)
    adaptation_cycles: AdaptationCycles = Field(default_factory=AdaptationCycles)
    health_correlations: HealthCorrelations = Field(default_factory=HealthCorrelations)
    baseline_shifts: BaselineShifts = Field(default_factory=BaselineShifts)
    lifestyle_patterns: List[str] = Field(default_factory=list)


# ============================================================================
# Aggregate
# ============================================================================

class UserProfile(BaseModel):
    age: int = 30
    sex: str = "unknown"
    training_goal: str = "general_fitness"
    experience_level: ExperienceLevel = "beginner"


class PredictiveFlags(BaseModel):
    illness_risk: RiskLevel = "low"
    overtraining_risk: RiskLevel = "low"
    peak_performance_window: Optional[str] = None


class HealthSummary(BaseModel):
    user_profile: UserProfile
    recent: RecentTrends
    weekly: WeeklyInsights
    monthly: MonthlyPatterns
    predictive_flags: PredictiveFlags


# ============================================================================
# Weather
# ============================================================================

class TodaysConditions(BaseModel):
    """Daily forecast for the user's city, used as briefing context only."""

    date: dt.date
    city: str
    temp_min_c: Optional[float] = None
    temp_max_c: Optional[float] = None
    precipitation_mm: Optional[float] = None
    wind_kph: Optional[float] = None
    weather_description: str = "Unknown"
    exercise_conditions: ExerciseConditions = "good"


# ============================================================================
# Coach output
# ============================================================================

class Briefing(BaseModel):
    """Structured daily briefing as returned by the coach model."""

    headline: str
    sleep_insight: Optional[str] = None
    readiness_note: Optional[str] = None
    training_plan: str
    micro_actions: List[str] = Field(default_factory=list)
    weather_note: Optional[str] = None
    caution: Optional[str] = None
