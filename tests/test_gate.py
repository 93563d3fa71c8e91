"""
Tests for the request gate.

These tests verify that:
- A marker is fresh only for the same URL, the same identity and within the staleness window
- Burst suppression blocks a second attempt within the interval regardless of key changes
"""

import pytest

from foodly.models import CacheMarker
from foodly.utils.gate import RequestGate, is_marker_fresh

URL = "http://api.test/recipes"
WINDOW = 5 * 60 * 1000


class TestIsMarkerFresh:
    """Test cases for is_marker_fresh function."""

    def test_no_marker_is_never_fresh(self):
        assert is_marker_fresh(None, URL, None, 0, WINDOW) is False

    def test_same_url_anonymous_within_window(self):
        marker = CacheMarker(url=URL, token=None, fetched_at_ms=1000)
        assert is_marker_fresh(marker, URL, None, 1000 + WINDOW, WINDOW) is True

    def test_url_change_invalidates(self):
        marker = CacheMarker(url=URL, token=None, fetched_at_ms=1000)
        assert is_marker_fresh(marker, URL + "?tags[]=vegan", None, 1001, WINDOW) is False

    def test_login_invalidates_anonymous_marker(self):
        """Data fetched anonymously lacks bookmark state for the new user."""
        marker = CacheMarker(url=URL, token=None, fetched_at_ms=1000)
        assert is_marker_fresh(marker, URL, "abc", 1001, WINDOW) is False

    def test_logout_invalidates_authenticated_marker(self):
        marker = CacheMarker(url=URL, token="abc", fetched_at_ms=1000)
        assert is_marker_fresh(marker, URL, None, 1001, WINDOW) is False

    def test_token_change_invalidates(self):
        marker = CacheMarker(url=URL, token="abc", fetched_at_ms=1000)
        assert is_marker_fresh(marker, URL, "xyz", 1001, WINDOW) is False
        assert is_marker_fresh(marker, URL, "abc", 1001, WINDOW) is True

    def test_staleness_window(self):
        """Test that a marker older than five minutes is stale even for the same key."""
        marker = CacheMarker(url=URL, token=None, fetched_at_ms=0)
        assert is_marker_fresh(marker, URL, None, 300_000, WINDOW) is True
        assert is_marker_fresh(marker, URL, None, 301_000, WINDOW) is False


class TestRequestGate:
    """Test cases for RequestGate."""

    def test_first_attempt_allowed(self):
        gate = RequestGate(min_interval_ms=200, stale_window_ms=WINDOW)
        assert gate.should_fetch(None, URL, None, 5000) is True

    def test_fresh_marker_blocks(self):
        gate = RequestGate(min_interval_ms=200, stale_window_ms=WINDOW)
        marker = CacheMarker(url=URL, token=None, fetched_at_ms=5000)
        assert gate.should_fetch(marker, URL, None, 6000) is False

    def test_burst_suppression_ignores_key_change(self):
        gate = RequestGate(min_interval_ms=200, stale_window_ms=WINDOW)
        gate.mark_started(5000)
        assert gate.should_fetch(None, URL, None, 5199) is False
        assert gate.should_fetch(None, URL + "/search/pie", None, 5100) is False

    def test_burst_window_expires(self):
        gate = RequestGate(min_interval_ms=200, stale_window_ms=WINDOW)
        gate.mark_started(5000)
        assert gate.should_fetch(None, URL, None, 5200) is True

    def test_force_skips_burst_suppression(self):
        gate = RequestGate(min_interval_ms=200, stale_window_ms=WINDOW)
        gate.mark_started(5000)
        assert gate.should_fetch(None, URL, "abc", 5050, force=True) is True

    def test_force_still_honours_fresh_marker(self):
        gate = RequestGate(min_interval_ms=200, stale_window_ms=WINDOW)
        marker = CacheMarker(url=URL, token="abc", fetched_at_ms=5000)
        assert gate.should_fetch(marker, URL, "abc", 6000, force=True) is False

    @pytest.mark.parametrize("env_value,expected", [("50", 50), ("", 200)])
    def test_interval_from_environment(self, monkeypatch, env_value, expected):
        monkeypatch.setenv("FOODLY_BURST_INTERVAL_MS", env_value)
        assert RequestGate().min_interval_ms == expected
