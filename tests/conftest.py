"""
Shared pytest fixtures for Fitlink Agent tests.
"""

import pytest
import sys
from pathlib import Path
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

# Add parent directory to path so we can import modal_agent
sys.path.insert(0, str(Path(__file__).parent.parent))

from fitlink_agent.models import ActivitySample, SleepSample


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Redirect all data paths to temp directory."""
    import fitlink_agent.utils
    import fitlink_agent.storage.samples
    import fitlink_agent.storage.users
    import fitlink_agent.storage.briefs

    monkeypatch.setattr(fitlink_agent.storage.samples, "SAMPLES_DIR", tmp_path / "samples")
    monkeypatch.setattr(fitlink_agent.storage.briefs, "BRIEFS_DIR", tmp_path / "briefs")
    monkeypatch.setattr(fitlink_agent.storage.users, "USERS_FILE", tmp_path / "users.json")
    monkeypatch.setattr(fitlink_agent.utils, "SAMPLES_DIR", tmp_path / "samples")
    monkeypatch.setattr(fitlink_agent.utils, "BRIEFS_DIR", tmp_path / "briefs")

    (tmp_path / "samples").mkdir()
    (tmp_path / "briefs").mkdir()

    return tmp_path


@pytest.fixture
def fixed_now(monkeypatch):
    """Mock now_utc() to return a fixed datetime (Thursday 2026-01-15 12:00 UTC)."""
    import fitlink_agent.utils
    import modal_agent

    fixed_time = datetime(2026, 1, 15, 12, 0, 0, tzinfo=ZoneInfo("UTC"))
    monkeypatch.setattr(fitlink_agent.utils, "now_utc", lambda: fixed_time)
    monkeypatch.setattr(modal_agent, "now_utc", lambda: fixed_time)
    return fixed_time


@pytest.fixture
def sleep_series():
    """
    Build newest-first SleepSamples, one per day ending on ``end``.

    Each keyword takes a list (newest first); all lists share one length.
    """
    fields = {
        "efficiency": "sleep_efficiency",
        "minutes": "total_sleep_minutes",
        "hrv": "hrv_avg",
        "rhr": "resting_heart_rate",
        "temp": "temperature_deviation",
        "readiness": "readiness_score",
        "bedtime": "bedtime_start",
    }

    def _build(end=date(2026, 1, 15), **series):
        length = max(len(v) for v in series.values())
        samples = []
        for i in range(length):
            values = {fields[k]: v[i] for k, v in series.items()}
            samples.append(SleepSample(date=end - timedelta(days=i), **values))
        return samples

    return _build


@pytest.fixture
def activity_series():
    """Build newest-first ActivitySamples, one per day ending on ``end``."""

    def _build(tss, end=datetime(2026, 1, 15, 7, 0, tzinfo=ZoneInfo("UTC")),
               duration_seconds=3600, step=timedelta(days=1)):
        return [
            ActivitySample(
                start_time=end - step * i,
                duration_seconds=duration_seconds,
                tss_estimated=value,
                external_id=f"act-{i}",
                activity_type="run",
            )
            for i, value in enumerate(tss)
        ]

    return _build


@pytest.fixture
def sample_user():
    return {
        "id": "42",
        "first_name": "Sam",
        "telegram_chat_id": 1001,
        "timezone": "Europe/London",
        "briefing_hour": 12,
        "is_active": True,
        "paused_until": None,
        "age": 35,
        "sex": "female",
        "training_goal": "endurance",
    }


@pytest.fixture
def sample_oura_sleep_sessions():
    """Detailed Oura sleep sessions (one nap, two main sleeps)."""
    return [
        {
            "id": "sleep-14",
            "type": "long_sleep",
            "day": "2026-01-13",
            "bedtime_start": "2026-01-13T22:45:00+00:00",
            "bedtime_end": "2026-01-14T06:50:00+00:00",
            "total_sleep_duration": 26400,
            "efficiency": 88,
            "average_hrv": 48,
            "lowest_heart_rate": 51,
        },
        {
            "id": "nap-14",
            "type": "late_nap",
            "day": "2026-01-14",
            "bedtime_start": "2026-01-14T15:00:00+00:00",
            "bedtime_end": "2026-01-14T15:40:00+00:00",
            "total_sleep_duration": 2100,
        },
        {
            "id": "sleep-15",
            "type": "long_sleep",
            "day": "2026-01-14",
            "bedtime_start": "2026-01-14T23:30:00+00:00",
            "bedtime_end": "2026-01-15T07:15:00+00:00",
            "total_sleep_duration": 25200,
            "efficiency": 90,
            "average_hrv": 52,
            "lowest_heart_rate": 48,
        },
    ]


@pytest.fixture
def sample_oura_readiness():
    return [
        {"id": "r-14", "day": "2026-01-14", "score": 74, "temperature_deviation": -0.1},
        {"id": "r-15", "day": "2026-01-15", "score": 78, "temperature_deviation": 0.15},
    ]


@pytest.fixture
def sample_strava_activities():
    """Strava /athlete/activities summary objects."""
    return [
        {
            "id": 9001,
            "name": "Morning Run",
            "type": "Run",
            "start_date": "2026-01-15T06:30:00Z",
            "elapsed_time": 2700,
            "distance": 8200.5,
        },
        {
            "id": 9002,
            "name": "Zwift",
            "type": "VirtualRide",
            "start_date": "2026-01-14T18:00:00Z",
            "elapsed_time": 3600,
            "distance": 30000.0,
        },
    ]


@pytest.fixture
def briefing_json():
    return (
        '{"headline": "Steady day ahead", '
        '"sleep_insight": "Seven hours at 90% efficiency.", '
        '"readiness_note": null, '
        '"training_plan": "45 min easy run, zone 2.", '
        '"micro_actions": ["Drink 500ml water on waking", "10 min mobility"], '
        '"weather_note": null, '
        '"caution": null}'
    )
