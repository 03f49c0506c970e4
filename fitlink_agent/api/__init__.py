"""Provider API clients (Oura, Strava, Open-Meteo)."""

from fitlink_agent.api.oura import (
    fetch_oura_data,
    get_oura_sleep_range,
)
from fitlink_agent.api.strava import fetch_strava_activities
from fitlink_agent.api.weather import (
    geocode_city,
    get_todays_conditions,
)

__all__ = [
    # Oura
    "fetch_oura_data",
    "get_oura_sleep_range",
    # Strava
    "fetch_strava_activities",
    # Weather
    "geocode_city",
    "get_todays_conditions",
]
