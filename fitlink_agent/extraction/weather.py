"""
Conversion of Open-Meteo daily forecasts into TodaysConditions.
"""

from datetime import date
from typing import Optional

from fitlink_agent.models import TodaysConditions

# WMO weather interpretation codes used by Open-Meteo
WMO_DESCRIPTIONS = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Freezing fog",
    51: "Light drizzle",
    53: "Drizzle",
    55: "Heavy drizzle",
    56: "Freezing drizzle",
    57: "Heavy freezing drizzle",
    61: "Light rain",
    63: "Rain",
    65: "Heavy rain",
    66: "Freezing rain",
    67: "Heavy freezing rain",
    71: "Light snow",
    73: "Snow",
    75: "Heavy snow",
    77: "Snow grains",
    80: "Light rain showers",
    81: "Rain showers",
    82: "Violent rain showers",
    85: "Snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with hail",
    99: "Thunderstorm with heavy hail",
}

THUNDERSTORM_CODES = {95, 96, 99}
ICY_CODES = {48, 56, 57, 66, 67, 71, 73, 75, 77, 85, 86}
CLEAR_CODES = {0, 1, 2}

POOR_RAIN_MM = 10
POOR_WIND_KPH = 40
POOR_HEAT_C = 32
POOR_COLD_C = -5
FAIR_RAIN_MM = 2
FAIR_WIND_KPH = 25
FAIR_HEAT_C = 27
FAIR_COLD_C = 2
EXCELLENT_WIND_KPH = 15
EXCELLENT_TEMP_RANGE_C = (8, 22)


def _first_value(daily: dict, key: str) -> Optional[float]:
    values = daily.get(key) or []
    return values[0] if values else None


def classify_exercise_conditions(
    weather_code: Optional[int],
    temp_max_c: Optional[float],
    precipitation_mm: Optional[float],
    wind_kph: Optional[float],
) -> str:
    """
    Rate the day for outdoor training. Missing readings never count against it.
    """
    rain = precipitation_mm or 0
    wind = wind_kph or 0

    if (
        weather_code in THUNDERSTORM_CODES
        or rain >= POOR_RAIN_MM
        or wind >= POOR_WIND_KPH
        or (temp_max_c is not None and not POOR_COLD_C < temp_max_c < POOR_HEAT_C)
    ):
        return "poor"

    if (
        weather_code in ICY_CODES
        or rain >= FAIR_RAIN_MM
        or wind >= FAIR_WIND_KPH
        or (temp_max_c is not None and not FAIR_COLD_C < temp_max_c < FAIR_HEAT_C)
    ):
        return "fair"

    low, high = EXCELLENT_TEMP_RANGE_C
    if (
        weather_code in CLEAR_CODES
        and rain == 0
        and wind < EXCELLENT_WIND_KPH
        and temp_max_c is not None
        and low <= temp_max_c <= high
    ):
        return "excellent"

    return "good"


def conditions_from_open_meteo(payload: dict, city: str, day: date) -> Optional[TodaysConditions]:
    """Build TodaysConditions from a one-day ``daily`` forecast, or None if it is empty."""
    daily = payload.get("daily") or {}
    if not daily.get("time"):
        return None

    code = _first_value(daily, "weather_code")
    code = int(code) if code is not None else None
    temp_max = _first_value(daily, "temperature_2m_max")
    rain = _first_value(daily, "precipitation_sum")
    wind = _first_value(daily, "wind_speed_10m_max")

    return TodaysConditions(
        date=day,
        city=city,
        temp_min_c=_first_value(daily, "temperature_2m_min"),
        temp_max_c=temp_max,
        precipitation_mm=rain,
        wind_kph=wind,
        weather_description=WMO_DESCRIPTIONS.get(code, "Unknown"),
        exercise_conditions=classify_exercise_conditions(code, temp_max, rain, wind),
    )
