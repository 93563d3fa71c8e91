"""
Base token store abstract class.

This module defines the interface every token persistence backend must implement.
The client persists exactly one value, the bearer token, under a single key; the
interface stays key-based so the same store can be shared with other small settings.

All stores must:
- Return None for missing keys instead of raising
- Complete writes synchronously (a reader never observes a half-written value)
- Treat delete() of a missing key as a no-op
"""

from abc import ABC, abstractmethod
from typing import Optional

# Key under which the bearer token is persisted
TOKEN_KEY = "jwtToken"


class TokenStore(ABC):
    """
    Abstract base class for persisted client state.

    SessionStore is the only writer; the recipe caches never touch the store.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a stored value.

        Args:
            key: Storage key (e.g., TOKEN_KEY)

        Returns:
            The stored string, or None if nothing is stored under key
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present."""
        pass
