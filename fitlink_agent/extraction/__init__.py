"""Sample and weather extraction module."""

from fitlink_agent.extraction.samples import (
    sleep_samples_from_oura,
    activity_from_strava,
    sleep_sample_from_row,
    activity_sample_from_row,
)
from fitlink_agent.extraction.weather import (
    classify_exercise_conditions,
    conditions_from_open_meteo,
)

__all__ = [
    "sleep_samples_from_oura",
    "activity_from_strava",
    "sleep_sample_from_row",
    "activity_sample_from_row",
    "classify_exercise_conditions",
    "conditions_from_open_meteo",
]
