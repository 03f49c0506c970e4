"""Tests for per-user briefing scheduling and data pruning."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from fitlink_agent.storage.briefs import save_brief
from fitlink_agent.utils import is_briefing_due, local_hour, prune_old_data, user_local_time

UTC = ZoneInfo("UTC")

# 2026-01-15 12:00 UTC is 12:00 in London and 07:00 in New York
NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


class TestLocalHour:
    def test_converts_to_user_timezone(self):
        assert local_hour(NOW, "America/New_York") == 7
        assert local_hour(NOW, "Asia/Tokyo") == 21

    def test_unknown_timezone_falls_back_to_utc(self):
        assert local_hour(NOW, "Mars/Olympus_Mons") == 12

    def test_local_date_can_differ(self):
        assert user_local_time(NOW, "Pacific/Kiritimati").day == 16


class TestIsBriefingDue:
    """Tests for is_briefing_due()."""

    def test_due_at_briefing_hour(self, temp_data_dir, sample_user):
        assert is_briefing_due(sample_user, NOW)

    def test_not_due_at_other_hours(self, temp_data_dir, sample_user):
        assert not is_briefing_due(sample_user, NOW + timedelta(hours=1))

    def test_inactive_user(self, temp_data_dir, sample_user):
        sample_user["is_active"] = False
        assert not is_briefing_due(sample_user, NOW)

    def test_paused_user(self, temp_data_dir, sample_user):
        sample_user["paused_until"] = (NOW + timedelta(days=2)).isoformat()
        assert not is_briefing_due(sample_user, NOW)

    def test_pause_expired(self, temp_data_dir, sample_user):
        sample_user["paused_until"] = (NOW - timedelta(hours=1)).isoformat()
        assert is_briefing_due(sample_user, NOW)

    def test_naive_pause_read_as_utc(self, temp_data_dir, sample_user):
        sample_user["paused_until"] = "2026-01-16T00:00:00"
        assert not is_briefing_due(sample_user, NOW)

    def test_already_sent_today(self, temp_data_dir, fixed_now, sample_user):
        save_brief(sample_user["id"], "2026-01-15", "sent earlier")
        assert not is_briefing_due(sample_user, NOW)

    def test_yesterday_brief_does_not_block(self, temp_data_dir, fixed_now, sample_user):
        save_brief(sample_user["id"], "2026-01-14", "sent yesterday")
        assert is_briefing_due(sample_user, NOW)

    def test_defaults_for_missing_schedule(self, temp_data_dir):
        user = {"id": "9"}
        assert is_briefing_due(user, datetime(2026, 1, 15, 7, 0, tzinfo=UTC))
        assert not is_briefing_due(user, NOW)

    def test_hour_matched_in_user_timezone(self, temp_data_dir, sample_user):
        sample_user["timezone"] = "America/New_York"
        sample_user["briefing_hour"] = 7
        assert is_briefing_due(sample_user, NOW)

        sample_user["briefing_hour"] = 12
        assert not is_briefing_due(sample_user, NOW)

    def test_hour_comes_from_local_hour(self, temp_data_dir, sample_user, monkeypatch):
        import fitlink_agent.utils

        calls = []

        def fake_local_hour(now, timezone):
            calls.append(timezone)
            return 6

        monkeypatch.setattr(fitlink_agent.utils, "local_hour", fake_local_hour)

        assert not is_briefing_due(sample_user, NOW)
        assert calls == ["Europe/London"]


class TestPruneOldData:
    def test_removes_briefs_past_retention(self, temp_data_dir, fixed_now):
        save_brief("42", "2026-01-14", "recent")
        save_brief("42", "2025-11-01", "old")

        prune_old_data()

        remaining = sorted(p.stem for p in (temp_data_dir / "briefs" / "42").glob("*.json"))
        assert remaining == ["2026-01-14"]
