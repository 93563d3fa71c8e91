"""
Foodly recipe catalog client.

This package contains:
- session: SessionStore, owner of the login session and the persisted token
- query_cache: QueryCache, the searched/filtered recipe list
- entity_cache: EntityCache, the focused recipe
- bookmarks: BookmarkSync, bookmark toggles applied to both caches
- browser: RecipeBrowser, wiring of all of the above
"""

from foodly.api_client import ApiClient
from foodly.bookmarks import BookmarkSync
from foodly.browser import RecipeBrowser
from foodly.entity_cache import EntityCache
from foodly.query_cache import QueryCache
from foodly.session import SessionStore

__all__ = [
    "ApiClient",
    "BookmarkSync",
    "EntityCache",
    "QueryCache",
    "RecipeBrowser",
    "SessionStore",
]
