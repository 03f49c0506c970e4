"""
Strava API client with retry logic.
"""

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from fitlink_agent.config import STRAVA_API_BASE, logger

# Upper bound on pages fetched per sync
MAX_PAGES = 20


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((requests.RequestException, requests.Timeout)),
    reraise=True
)
def fetch_strava_page(token: str, after: int, page: int, per_page: int) -> list:
    """Fetch one page of athlete activities with automatic retry."""
    response = requests.get(
        f"{STRAVA_API_BASE}/athlete/activities",
        headers={"Authorization": f"Bearer {token}"},
        params={"after": int(after), "per_page": per_page, "page": page},
        timeout=30
    )
    response.raise_for_status()
    return response.json()


def fetch_strava_activities(token: str, after: int, per_page: int = 50) -> list:
    """
    Fetch all of the athlete's activities started after a unix timestamp.

    Args:
        token: Strava access token
        after: Unix timestamp (seconds); only later activities are returned
        per_page: Page size, Strava allows up to 200

    Pages are requested until one comes back short.
    """
    activities = []
    for page in range(1, MAX_PAGES + 1):
        batch = fetch_strava_page(token, after, page, per_page)
        activities.extend(batch)
        if len(batch) < per_page:
            break
    else:
        logger.warning(f"Stopped Strava paging after {MAX_PAGES} pages ({len(activities)} activities)")
    return activities
