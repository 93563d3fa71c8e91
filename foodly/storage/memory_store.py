"""
In-memory token store.

Nothing survives the process; suitable for tests and for short-lived scripts that log
in explicitly.
"""

from typing import Dict, Optional

from .base import TokenStore


class MemoryTokenStore(TokenStore):
    """Token store keeping values in a plain dict."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)
