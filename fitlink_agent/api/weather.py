"""
Open-Meteo weather client with retry logic.

Open-Meteo needs no API key. Users store a ``location`` with a city name and,
once resolved, its coordinates.
"""

from datetime import date
from typing import Optional, Tuple

import requests
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from fitlink_agent.config import OPEN_METEO_FORECAST_URL, OPEN_METEO_GEOCODING_URL, logger
from fitlink_agent.extraction.weather import conditions_from_open_meteo
from fitlink_agent.models import TodaysConditions

DAILY_FIELDS = "weather_code,temperature_2m_max,temperature_2m_min,precipitation_sum,wind_speed_10m_max"


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((requests.RequestException, requests.Timeout)),
    reraise=True
)
def fetch_open_meteo(url: str, params: dict) -> dict:
    """GET an Open-Meteo endpoint with automatic retry on transient failures."""
    response = requests.get(url, params=params, timeout=15)
    response.raise_for_status()
    return response.json()


def geocode_city(city: str) -> Optional[Tuple[float, float]]:
    """Resolve a city name to (latitude, longitude), or None if unknown."""
    result = fetch_open_meteo(
        OPEN_METEO_GEOCODING_URL,
        {"name": city, "count": 1, "language": "en", "format": "json"},
    )
    matches = result.get("results") or []
    if not matches:
        return None
    return matches[0]["latitude"], matches[0]["longitude"]


def fetch_daily_forecast(latitude: float, longitude: float, day: date, timezone: str) -> dict:
    day_str = day.strftime("%Y-%m-%d")
    return fetch_open_meteo(
        OPEN_METEO_FORECAST_URL,
        {
            "latitude": latitude,
            "longitude": longitude,
            "daily": DAILY_FIELDS,
            "timezone": timezone,
            "start_date": day_str,
            "end_date": day_str,
        },
    )


def get_todays_conditions(location: Optional[dict], day: date, timezone: str) -> Optional[TodaysConditions]:
    """
    Forecast for ``day`` at the user's location.

    Coordinates are taken from the location when present, otherwise the city
    is geocoded. Any failure is logged and yields None so the briefing goes
    out without weather.
    """
    if not location or not location.get("city"):
        return None

    city = location["city"]
    try:
        latitude = location.get("latitude")
        longitude = location.get("longitude")
        if latitude is None or longitude is None:
            coordinates = geocode_city(city)
            if coordinates is None:
                logger.warning(f"Could not geocode city {city!r}")
                return None
            latitude, longitude = coordinates

        forecast = fetch_daily_forecast(latitude, longitude, day, timezone)
        return conditions_from_open_meteo(forecast, city, day)
    except (requests.RequestException, ValidationError, KeyError) as e:
        logger.warning(f"Failed to fetch weather for {city}: {e}")
        return None
