"""Health-trend summarization engine."""

from fitlink_agent.analysis.primitives import (
    InvalidSeriesError,
    percent_trend,
    consistency_score,
    baseline,
    long_term_slope,
    correlation,
)
from fitlink_agent.analysis.recent import analyze_recent_trends
from fitlink_agent.analysis.weekly import analyze_weekly_insights
from fitlink_agent.analysis.monthly import analyze_monthly_patterns
from fitlink_agent.analysis.predictive import generate_predictive_flags
from fitlink_agent.analysis.summarizer import (
    summarize_health,
    infer_experience_level,
)

__all__ = [
    # Primitives
    "InvalidSeriesError",
    "percent_trend",
    "consistency_score",
    "baseline",
    "long_term_slope",
    "correlation",
    # Analyzers
    "analyze_recent_trends",
    "analyze_weekly_insights",
    "analyze_monthly_patterns",
    "generate_predictive_flags",
    # Entry point
    "summarize_health",
    "infer_experience_level",
]
