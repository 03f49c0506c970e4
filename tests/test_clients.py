"""Tests for the Oura, Strava and Telegram HTTP clients."""

from unittest.mock import MagicMock, patch

import requests

from fitlink_agent.api.oura import get_oura_sleep_range
from fitlink_agent.api.strava import MAX_PAGES, fetch_strava_activities
from fitlink_agent.telegram.client import send_telegram, split_message


class TestGetOuraSleepRange:
    """Tests for get_oura_sleep_range()."""

    def test_filters_to_main_sleep_in_range(self, sample_oura_sleep_sessions, sample_oura_readiness):
        outside = {
            "id": "sleep-old",
            "type": "long_sleep",
            "bedtime_end": "2026-01-12T07:00:00+00:00",
        }

        def fake_fetch(token, endpoint, start_date, end_date=None):
            if endpoint == "sleep":
                return {"data": sample_oura_sleep_sessions + [outside]}
            return {"data": sample_oura_readiness}

        with patch("fitlink_agent.api.oura.fetch_oura_data", side_effect=fake_fetch):
            result = get_oura_sleep_range("token", "2026-01-14", "2026-01-15")

        assert [s["id"] for s in result["sleep"]] == ["sleep-14", "sleep-15"]
        assert len(result["daily_readiness"]) == 2

    def test_sleep_query_widened_by_a_day(self):
        with patch("fitlink_agent.api.oura.fetch_oura_data", return_value={"data": []}) as mock_fetch:
            get_oura_sleep_range("token", "2026-01-14", "2026-01-15")

        mock_fetch.assert_any_call("token", "daily_readiness", "2026-01-14", "2026-01-15")
        mock_fetch.assert_any_call("token", "sleep", "2026-01-13", "2026-01-16")

    def test_failure_degrades_to_empty(self):
        with patch(
            "fitlink_agent.api.oura.fetch_oura_data",
            side_effect=requests.ConnectionError("down"),
        ):
            result = get_oura_sleep_range("token", "2026-01-14", "2026-01-15")

        assert result == {"sleep": [], "daily_readiness": []}


class TestFetchStravaActivities:
    def test_request(self, sample_strava_activities):
        response = MagicMock()
        response.json.return_value = sample_strava_activities

        with patch("fitlink_agent.api.strava.requests.get", return_value=response) as mock_get:
            result = fetch_strava_activities("strava-token", 1768000000.7)

        assert result == sample_strava_activities
        args, kwargs = mock_get.call_args
        assert args[0] == "https://www.strava.com/api/v3/athlete/activities"
        assert kwargs["headers"] == {"Authorization": "Bearer strava-token"}
        assert kwargs["params"] == {"after": 1768000000, "per_page": 50, "page": 1}
        response.raise_for_status.assert_called_once()

    def test_follows_pages_until_short_page(self):
        pages = [[{"id": i} for i in range(3)], [{"id": 3}, {"id": 4}, {"id": 5}], [{"id": 6}]]
        responses = []
        for page in pages:
            response = MagicMock()
            response.json.return_value = page
            responses.append(response)

        with patch("fitlink_agent.api.strava.requests.get", side_effect=responses) as mock_get:
            result = fetch_strava_activities("strava-token", 1768000000, per_page=3)

        assert [a["id"] for a in result] == list(range(7))
        assert [c.kwargs["params"]["page"] for c in mock_get.call_args_list] == [1, 2, 3]

    def test_page_limit(self):
        response = MagicMock()
        response.json.return_value = [{"id": 1}]

        with patch("fitlink_agent.api.strava.requests.get", return_value=response) as mock_get:
            result = fetch_strava_activities("strava-token", 0, per_page=1)

        assert mock_get.call_count == MAX_PAGES
        assert len(result) == MAX_PAGES


class TestSendTelegram:
    """Tests for send_telegram()."""

    def _response(self, ok=True, text=""):
        response = MagicMock()
        response.ok = ok
        response.text = text
        response.status_code = 200 if ok else 400
        return response

    def test_markdown_send(self):
        with patch("fitlink_agent.telegram.client.requests.post", return_value=self._response()) as mock_post:
            assert send_telegram("*hi*", "bot-token", "1001")

        args, kwargs = mock_post.call_args
        assert args[0] == "https://api.telegram.org/botbot-token/sendMessage"
        assert kwargs["json"]["parse_mode"] == "Markdown"
        assert kwargs["json"]["chat_id"] == "1001"

    def test_falls_back_to_plain_text(self):
        responses = [
            self._response(ok=False, text="Bad Request: can't parse entities"),
            self._response(),
        ]
        with patch("fitlink_agent.telegram.client.requests.post", side_effect=responses) as mock_post:
            assert send_telegram("*broken", "bot-token", "1001")

        assert "parse_mode" not in mock_post.call_args_list[1].kwargs["json"]

    def test_api_error_returns_false(self):
        with patch(
            "fitlink_agent.telegram.client.requests.post",
            return_value=self._response(ok=False, text="Forbidden: bot was blocked"),
        ):
            assert not send_telegram("hi", "bot-token", "1001")

    def test_long_message_chunked(self):
        with patch("fitlink_agent.telegram.client.requests.post", return_value=self._response()) as mock_post:
            assert send_telegram("x" * 9000, "bot-token", "1001")
        assert mock_post.call_count == 3

    def test_split_message(self):
        chunks = split_message("a" * 8001)
        assert [len(c) for c in chunks] == [4000, 4000, 1]

    def test_split_prefers_line_breaks(self):
        message = "*Plan:* easy run\n" * 300
        chunks = split_message(message)

        assert len(chunks) == 2
        assert all(len(c) <= 4000 for c in chunks)
        assert all(c.startswith("*Plan:*") for c in chunks)
        assert "".join(chunks).count("*Plan:*") == 300
