"""
Fitlink Health Coach Agent
Syncs Oura and Strava data, summarizes health trends, and sends each user a
daily coaching briefing on Telegram at their local briefing hour.

This is the Modal entrypoint. All logic is in the fitlink_agent package.
"""

import modal
import os
from datetime import timedelta

# ============================================================================
# MODAL CONFIGURATION
# ============================================================================

image = (
    modal.Image.debian_slim(python_version="3.11")
    .pip_install(
        "anthropic>=0.40.0",
        "requests>=2.28.0",
        "fastapi>=0.100.0",
        "tenacity>=8.2.0",
        "pydantic>=2.5.0",
        "python-dotenv>=1.0.0",
    )
    .add_local_dir("prompts", "/root/prompts")
    .add_local_dir("fitlink_agent", "/root/fitlink_agent")
)

app = modal.App("fitlink-agent", image=image)

# Persistent volume for samples, users and briefing logs
volume = modal.Volume.from_name("fitlink-health-data", create_if_missing=True)

# ============================================================================
# RE-EXPORTS FOR TESTS
# ============================================================================
# Tests use monkeypatch.setattr(modal_agent, "X", ...) on these names.

import anthropic
import requests
from pydantic import ValidationError

from fitlink_agent.config import (
    DEFAULT_LOOKBACK_DAYS,
    SYNC_DAYS_BACK,
    MAX_SYNC_DAYS_BACK,
    logger,
)

from fitlink_agent.utils import (
    now_utc,
    ensure_directories,
    prune_old_data,
    user_local_time,
    is_briefing_due,
)

from fitlink_agent.api.oura import get_oura_sleep_range
from fitlink_agent.api.strava import fetch_strava_activities
from fitlink_agent.api.weather import geocode_city, get_todays_conditions

from fitlink_agent.extraction.samples import (
    sleep_samples_from_oura,
    activity_from_strava,
)

from fitlink_agent.storage.samples import (
    save_sleep_samples,
    save_activity_samples,
    load_sleep_samples,
    load_activity_samples,
    prune_samples,
)

from fitlink_agent.storage.users import (
    get_user,
    get_active_users,
    set_location,
    user_profile,
)

from fitlink_agent.storage.briefs import load_recent_briefs, save_brief

from fitlink_agent.analysis.summarizer import summarize_health

from fitlink_agent.telegram.client import send_telegram

from fitlink_agent.claude.briefing import (
    BriefingFormatError,
    generate_briefing_with_claude,
    format_briefing_message,
)

# Errors that fail one user's briefing without stopping the batch
BRIEFING_ERRORS = (
    anthropic.APIError,
    BriefingFormatError,
    ValidationError,
    requests.RequestException,
    OSError,
)

# Errors that fail one user's sync without stopping the batch
SYNC_ERRORS = (
    ValidationError,
    requests.RequestException,
    OSError,
)

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _reload_volume():
    """Reload volume to see latest commits from other containers."""
    try:
        volume.reload()
    except RuntimeError:
        pass  # Running locally, not in Modal


def _token(user: dict, key: str, env_var: str):
    """Per-user provider token, falling back to the deployment-wide one."""
    return user.get(key) or os.environ.get(env_var)


def sync_user_data(user: dict, now, days_back: int = SYNC_DAYS_BACK) -> dict:
    """Fetch the last ``days_back`` days from Oura and Strava and upsert samples."""
    days_back = max(1, min(days_back, MAX_SYNC_DAYS_BACK))
    user_id = user["id"]
    counts = {"sleep": 0, "activities": 0}

    oura_token = _token(user, "oura_token", "OURA_ACCESS_TOKEN")
    if oura_token:
        start_date = (now - timedelta(days=days_back)).strftime("%Y-%m-%d")
        end_date = now.strftime("%Y-%m-%d")
        oura_data = get_oura_sleep_range(oura_token, start_date, end_date)
        samples = sleep_samples_from_oura(oura_data["sleep"], oura_data["daily_readiness"])
        counts["sleep"] = save_sleep_samples(user_id, samples)

    strava_token = _token(user, "strava_token", "STRAVA_ACCESS_TOKEN")
    if strava_token:
        after = int((now - timedelta(days=days_back)).timestamp())
        try:
            raw_activities = fetch_strava_activities(strava_token, after)
        except requests.RequestException as e:
            logger.warning(f"Failed to fetch Strava activities for user {user_id}: {e}")
            raw_activities = []

        activities = []
        for raw in raw_activities:
            try:
                activities.append(activity_from_strava(raw))
            except ValidationError as e:
                logger.warning(f"Skipping malformed Strava activity {raw.get('id')}: {e}")
        counts["activities"] = save_activity_samples(user_id, activities)

    logger.info(
        f"Synced user {user_id}: {counts['sleep']} nights, {counts['activities']} activities"
    )
    return counts


def build_user_summary(user: dict, now, lookback_days: int = DEFAULT_LOOKBACK_DAYS):
    """Load the user's sample windows and run them through the summarizer."""
    local_today = user_local_time(now, user.get("timezone") or "UTC").date()
    sleep = load_sleep_samples(user["id"], lookback_days, local_today)
    activities = load_activity_samples(user["id"], lookback_days, now)

    summary = summarize_health(
        sleep,
        activities,
        lookback_days=lookback_days,
        profile=user_profile(user),
        as_of=now,
        parallel=True,
    )
    return summary, sleep, activities


def generate_user_briefing(user: dict, now, anthropic_key: str, bot_token: str) -> str:
    """
    Build, send and log one user's briefing.

    Returns "sent", "no_chat" (no Telegram chat linked), "no_data" (nothing
    synced yet) or "send_failed". Briefing errors propagate to the caller.
    """
    user_id = user["id"]
    chat_id = user.get("telegram_chat_id")
    if not chat_id:
        logger.warning(f"User {user_id} has no Telegram chat, skipping briefing")
        return "no_chat"

    summary, sleep, activities = build_user_summary(user, now)

    if not sleep and not activities:
        logger.info(f"No data for user {user_id}, skipping briefing")
        return "no_data"

    timezone = user.get("timezone") or "UTC"
    local_now = user_local_time(now, timezone)
    weather = get_todays_conditions(user.get("location"), local_now.date(), timezone)
    recent_briefs = load_recent_briefs(user_id, days=3, today=local_now.date())

    briefing = generate_briefing_with_claude(
        anthropic_key,
        summary,
        user,
        activities,
        weather=weather,
        recent_briefs=recent_briefs,
    )

    message = format_briefing_message(user.get("first_name"), briefing, local_now.hour)

    if not send_telegram(message, bot_token, str(chat_id)):
        logger.error(f"Failed to send briefing to user {user_id}")
        return "send_failed"

    save_brief(
        user_id,
        local_now.strftime("%Y-%m-%d"),
        message,
        {
            "briefing": briefing.model_dump(),
            "summary": summary.model_dump(mode="json"),
            "weather": weather.model_dump(mode="json") if weather else None,
            "data_sources": {
                "has_sleep": bool(sleep),
                "has_activities": bool(activities),
                "has_weather": weather is not None,
            },
        },
    )
    logger.info(f"Briefing sent to user {user_id}")
    return "sent"


# ============================================================================
# SCHEDULED FUNCTIONS
# ============================================================================

@app.function(
    secrets=[
        modal.Secret.from_name("oura"),
        modal.Secret.from_name("strava"),
    ],
    volumes={"/data": volume},
    timeout=600,
    schedule=modal.Cron("45 * * * *"),  # ahead of the hourly briefing run
)
def sync_provider_data(days_back: int = SYNC_DAYS_BACK):
    """Sync recent Oura and Strava data for every active user."""
    _reload_volume()
    ensure_directories()
    now = now_utc()

    results = {}
    for user in get_active_users():
        try:
            results[user["id"]] = sync_user_data(user, now, days_back)
        except SYNC_ERRORS as e:
            logger.error(f"Sync failed for user {user['id']}: {e}")
            results[user["id"]] = {"error": str(e)}

    volume.commit()
    logger.info(f"Synced {len(results)} users")
    return results


@app.function(
    secrets=[
        modal.Secret.from_name("anthropic"),
        modal.Secret.from_name("telegram"),
    ],
    volumes={"/data": volume},
    timeout=900,
    schedule=modal.Cron("0 * * * *"),
)
def daily_briefings():
    """
    Hourly run: send a briefing to every user whose local briefing hour is now.

    Each user is handled independently; a failure is logged and counted and
    the batch carries on.
    """
    _reload_volume()
    ensure_directories()
    now = now_utc()

    anthropic_key = os.environ.get("ANTHROPIC_API_KEY")
    bot_token = os.environ.get("TELEGRAM_BOT_TOKEN")

    result = {"status": "success", "users_processed": 0, "briefings_sent": 0, "errors": 0}

    for user in get_active_users():
        if not is_briefing_due(user, now):
            continue

        result["users_processed"] += 1
        try:
            status = generate_user_briefing(user, now, anthropic_key, bot_token)
        except BRIEFING_ERRORS as e:
            logger.error(f"Briefing failed for user {user['id']}: {e}")
            result["errors"] += 1
            continue

        if status == "sent":
            result["briefings_sent"] += 1
        elif status in ("send_failed", "no_chat"):
            result["errors"] += 1

    prune_old_data()
    for user in get_active_users():
        prune_samples(user["id"], now.date())

    volume.commit()
    logger.info(
        f"Daily briefings: {result['users_processed']} processed, "
        f"{result['briefings_sent']} sent, {result['errors']} errors"
    )
    return result


# ============================================================================
# MANUAL TRIGGERS
# ============================================================================

@app.function(
    secrets=[
        modal.Secret.from_name("anthropic"),
        modal.Secret.from_name("telegram"),
    ],
    volumes={"/data": volume},
    timeout=300,
)
def run_briefing_now(user_id: str):
    """Manual trigger: send one user's briefing regardless of schedule."""
    _reload_volume()
    ensure_directories()

    user = get_user(user_id)
    if user is None:
        logger.warning(f"Unknown user {user_id}")
        return {"status": "not_found", "user_id": user_id}

    status = generate_user_briefing(
        user,
        now_utc(),
        os.environ.get("ANTHROPIC_API_KEY"),
        os.environ.get("TELEGRAM_BOT_TOKEN"),
    )
    volume.commit()
    return {"status": status, "user_id": user_id}


@app.function(
    volumes={"/data": volume},
    timeout=60,
)
def set_user_location(user_id: str, city: str):
    """Store a user's city for weather-aware briefings, resolving its coordinates once."""
    _reload_volume()
    ensure_directories()

    if get_user(user_id) is None:
        logger.warning(f"Unknown user {user_id}")
        return {"status": "not_found", "user_id": user_id}

    try:
        coordinates = geocode_city(city)
    except requests.RequestException as e:
        logger.warning(f"Geocoding failed for {city!r}: {e}")
        coordinates = None

    latitude, longitude = coordinates or (None, None)
    set_location(user_id, city, latitude, longitude)
    volume.commit()

    status = "located" if coordinates else "unresolved"
    return {"status": status, "user_id": user_id, "city": city, "latitude": latitude, "longitude": longitude}


# ============================================================================
# DASHBOARD ENDPOINT
# ============================================================================

from fastapi import Request
from fastapi.responses import JSONResponse


@app.function(
    secrets=[modal.Secret.from_name("fitlink")],
    volumes={"/data": volume},
)
@modal.fastapi_endpoint(method="POST")
async def dashboard_summary(request: Request):
    """Return a user's HealthSummary as JSON for the web dashboard."""
    dashboard_secret = os.environ.get("DASHBOARD_SECRET")
    if not dashboard_secret:
        logger.error("DASHBOARD_SECRET not configured - rejecting request")
        return JSONResponse({"ok": False, "error": "server misconfigured"}, status_code=500)

    if request.headers.get("X-Dashboard-Secret", "") != dashboard_secret:
        logger.warning("Dashboard auth failed: invalid secret")
        return JSONResponse({"ok": False, "error": "unauthorized"}, status_code=401)

    body = await request.json()
    _reload_volume()
    return dashboard_payload(
        str(body.get("user_id", "")),
        int(body.get("lookback_days", DEFAULT_LOOKBACK_DAYS)),
    )


def dashboard_payload(user_id: str, lookback_days: int = DEFAULT_LOOKBACK_DAYS):
    user = get_user(user_id)
    if user is None:
        return JSONResponse({"ok": False, "error": "user not found"}, status_code=404)

    summary, _, _ = build_user_summary(user, now_utc(), lookback_days)
    return {"ok": True, "user_id": user_id, "summary": summary.model_dump(mode="json")}


@app.local_entrypoint()
def main(user_id: str = ""):
    """CLI entrypoint: sync, then brief one user (or run the hourly batch)."""
    logger.info("Syncing provider data...")
    sync_provider_data.remote()
    if user_id:
        result = run_briefing_now.remote(user_id)
    else:
        result = daily_briefings.remote()
    logger.info(f"Result: {result}")
