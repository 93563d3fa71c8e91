"""
Request gate for the recipe caches.

This module decides whether a cache actually needs to hit the backend. It combines
two checks:
- Marker freshness: the last fetch used the same URL, under the same identity, and is
  younger than the staleness window
- Burst suppression: no other attempt for the same store was started within the last
  min_interval_ms, regardless of key changes

Burst suppression debounces the imperative refresh trigger (e.g. two state updates in
the same tick). Keystroke debouncing belongs to the UI, not here.
"""

from typing import Optional

from foodly.config import CacheConfig
from foodly.models import CacheMarker


def is_marker_fresh(
    marker: Optional[CacheMarker],
    url: str,
    token: Optional[str],
    now_ms: int,
    stale_window_ms: int,
) -> bool:
    """
    Check whether a cache marker still covers a request.

    Args:
        marker: Marker of the last successful fetch (None after a failure or before any fetch)
        url: URL the caller would fetch now
        token: Active bearer token, None when logged out
        now_ms: Current time in milliseconds
        stale_window_ms: Maximum marker age

    Returns:
        True if the cached data can be served without a new request

    Examples:
        >>> m = CacheMarker(url="http://api/recipes", token=None, fetched_at_ms=1000)
        >>> is_marker_fresh(m, "http://api/recipes", None, 2000, 300000)
        True
        >>> is_marker_fresh(m, "http://api/recipes", "abc", 2000, 300000)
        False
    """
    if marker is None:
        return False
    if marker.url != url:
        return False
    if token is not None:
        # Logged in: the data must have been fetched with this very token
        if marker.token != token:
            return False
    elif marker.token is not None:
        # Logged out, but the data still carries a user's bookmark state
        return False
    return now_ms - marker.fetched_at_ms <= stale_window_ms


class RequestGate:
    """
    Per-store fetch gate.

    Each cache owns one gate; the burst window is tracked per gate, so list and detail
    fetches never suppress each other.

    Attributes:
        min_interval_ms: Burst suppression window
        stale_window_ms: Staleness window for markers
        last_started_ms: Start time of the last attempt, None before the first one
    """

    def __init__(
        self,
        min_interval_ms: Optional[int] = None,
        stale_window_ms: Optional[int] = None,
    ) -> None:
        self.min_interval_ms = (
            min_interval_ms if min_interval_ms is not None else CacheConfig.get_burst_interval_ms()
        )
        self.stale_window_ms = (
            stale_window_ms if stale_window_ms is not None else CacheConfig.get_stale_window_ms()
        )
        self.last_started_ms: Optional[int] = None

    def is_bursting(self, now_ms: int) -> bool:
        """True if an attempt was started less than min_interval_ms ago."""
        if self.last_started_ms is None:
            return False
        return now_ms - self.last_started_ms < self.min_interval_ms

    def should_fetch(
        self,
        marker: Optional[CacheMarker],
        url: str,
        token: Optional[str],
        now_ms: int,
        force: bool = False,
    ) -> bool:
        """
        Decide whether a request must be issued now.

        Args:
            force: Skip burst suppression (the marker is still honoured). Used for
                deliberate triggers such as an identity change or a user search.

        Returns:
            False if the marker is still fresh for (url, token), or if the previous attempt
            started within the burst window and force is not set; True otherwise
        """
        if is_marker_fresh(marker, url, token, now_ms, self.stale_window_ms):
            return False
        if force:
            return True
        return not self.is_bursting(now_ms)

    def mark_started(self, now_ms: int) -> None:
        """Record that an attempt starts now."""
        self.last_started_ms = now_ms
