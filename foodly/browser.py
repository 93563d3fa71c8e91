"""
Recipe browser: wiring of the session store and the caches.

RecipeBrowser is the glue a front end would otherwise write by hand. It owns one
ApiClient shared by every component and, after each identity change, pushes the new
session into the caches and re-invokes refresh(). The caches themselves stay
push-based; only this layer reacts to login/logout.

These refreshes, like search() and filter_by_slugs(), are deliberate triggers and bypass
burst suppression. A fresh marker for the same URL and identity still prevents a refetch.

Example:
    >>> browser = RecipeBrowser()
    >>> browser.start()
    >>> browser.search("pizza")
    >>> [r.title for r in browser.recipes]
"""

import logging
from typing import Iterable, List, Optional

from foodly.api_client import ApiClient
from foodly.bookmarks import BookmarkSync
from foodly.entity_cache import EntityCache
from foodly.models import Recipe, Session, User
from foodly.query_cache import QueryCache
from foodly.session import SessionStore
from foodly.storage import FileTokenStore, TokenStore
from foodly.tags import TagCatalog
from foodly.utils.clock import Clock, now_ms

logger = logging.getLogger(__name__)


class RecipeBrowser:
    """Facade over SessionStore, QueryCache, EntityCache, BookmarkSync and TagCatalog."""

    def __init__(
        self,
        client: Optional[ApiClient] = None,
        storage: Optional[TokenStore] = None,
        clock: Clock = now_ms,
    ) -> None:
        """
        Args:
            client: Shared ApiClient (optional, configured from the environment otherwise)
            storage: Token persistence (optional, FileTokenStore by default)
            clock: Millisecond clock for the caches (tests inject a fake one)
        """
        self.client = client or ApiClient()
        self.sessions = SessionStore(self.client, storage or FileTokenStore())
        self.query = QueryCache(self.client, clock=clock)
        self.entity = EntityCache(self.client, self.query, clock=clock)
        self.bookmarks = BookmarkSync(self.client, self.query, self.entity)
        self.tags = TagCatalog(self.client, clock=clock)

    @property
    def session(self) -> Session:
        return self.sessions.session

    @property
    def recipes(self) -> List[Recipe]:
        return self.query.recipes

    @property
    def recipe(self) -> Optional[Recipe]:
        return self.entity.recipe

    def _push_identity(self) -> None:
        session = self.sessions.session
        self.query.set_session(session)
        self.entity.set_session(session)
        self.bookmarks.set_session(session)

    def _identity_changed(self) -> None:
        self._push_identity()
        # Identity changes must reach the list even right after another fetch
        self.query.refresh(force=True)

    def start(self) -> Session:
        """Restore the persisted session and load the initial recipe list."""
        session = self.sessions.rehydrate()
        self._identity_changed()
        return session

    def register(self, username: str, password: str) -> User:
        return self.sessions.register(username, password)

    def login(self, username: str, password: str) -> None:
        """Log in, then reload the list so bookmark state matches the new user."""
        self.sessions.login(username, password)
        self._identity_changed()

    def logout(self) -> None:
        self.sessions.logout()
        self._identity_changed()

    def search(self, query: Optional[str]) -> bool:
        """Search by text. Not burst-suppressed; an unchanged search is served from cache."""
        return self.query.set_query(query, force=True)

    def filter_by_slugs(self, slugs: Iterable[str]) -> bool:
        return self.query.set_filter(self.tags.resolve(slugs), force=True)

    def open_recipe(self, recipe_id: int) -> Optional[Recipe]:
        return self.entity.fetch_recipe(recipe_id)

    def toggle_bookmark(self, recipe_id: int) -> Optional[bool]:
        return self.bookmarks.toggle_bookmark(recipe_id)

    def close(self) -> None:
        self.client.close()
