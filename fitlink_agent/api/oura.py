"""
Oura API client with retry logic.
"""

import requests
from datetime import datetime, timedelta
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from fitlink_agent.config import OURA_API_BASE, logger


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((requests.RequestException, requests.Timeout)),
    reraise=True
)
def fetch_oura_data(token: str, endpoint: str, start_date: str, end_date: str = None) -> dict:
    """Fetch data from Oura API with automatic retry on transient failures."""
    url = f"{OURA_API_BASE}/{endpoint}"
    params = {"start_date": start_date}
    if end_date:
        params["end_date"] = end_date

    response = requests.get(
        url,
        headers={"Authorization": f"Bearer {token}"},
        params=params,
        timeout=30
    )
    response.raise_for_status()
    return response.json()


def get_oura_sleep_range(token: str, start_date: str, end_date: str) -> dict:
    """
    Fetch sleep sessions and readiness for a range of wake dates.

    Oura's detailed sleep endpoint keys sessions by the night they started, so
    the query is widened by a day on each side. Only ``long_sleep`` sessions
    (the main sleep) are kept; naps and short fragments are dropped.

    Returns:
        Dict with keys: sleep (detailed sessions), daily_readiness
    """
    data = {}

    day_before = (datetime.strptime(start_date, "%Y-%m-%d") - timedelta(days=1)).strftime("%Y-%m-%d")
    day_after = (datetime.strptime(end_date, "%Y-%m-%d") + timedelta(days=1)).strftime("%Y-%m-%d")

    try:
        result = fetch_oura_data(token, "daily_readiness", start_date, end_date)
        data["daily_readiness"] = result.get("data", [])
    except requests.RequestException as e:
        logger.warning(f"Failed to fetch daily_readiness: {e}")
        data["daily_readiness"] = []

    try:
        result = fetch_oura_data(token, "sleep", day_before, day_after)
        data["sleep"] = [
            session for session in result.get("data", [])
            if session.get("type") == "long_sleep"
            and start_date <= (session.get("bedtime_end") or "")[:10] <= end_date
        ]
    except requests.RequestException as e:
        logger.warning(f"Failed to fetch sleep: {e}")
        data["sleep"] = []

    return data
