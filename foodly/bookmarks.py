"""
Bookmark synchronization.

BookmarkSync issues the bookmark toggle and fans the backend's answer out to both cached
views of a recipe: the entry in QueryCache's list and the focused recipe in EntityCache.
The boolean returned by the backend is the only source of truth; nothing is flipped
locally before it arrives.

Both caches are updated back to back with no network call in between, so the list and
the detail view never disagree about a recipe's bookmark.
"""

import logging
from typing import Optional

from foodly.api_client import ApiClient
from foodly.entity_cache import EntityCache
from foodly.errors import AuthError, FoodlyError
from foodly.models import Pagination, Recipe, Session
from foodly.query_cache import QueryCache

logger = logging.getLogger(__name__)


class BookmarkSync:
    """Bookmark mutations for the logged-in user."""

    def __init__(
        self,
        client: ApiClient,
        query_cache: QueryCache,
        entity_cache: EntityCache,
        session: Optional[Session] = None,
    ) -> None:
        self.client = client
        self.query_cache = query_cache
        self.entity_cache = entity_cache
        self._session = session or Session()

    def set_session(self, session: Session) -> None:
        self._session = session

    def toggle_bookmark(self, recipe_id: int) -> Optional[bool]:
        """
        Toggle the bookmark of a recipe.

        Neither cache is touched when an error is raised.

        Args:
            recipe_id: Id of the recipe

        Returns:
            The new bookmark state, or None when logged out (no request is made)

        Raises:
            AuthError: The backend refused the token
            FetchError: Unexpected response
            NetworkError: Backend unreachable
        """
        token = self._session.active_token
        if token is None:
            logger.debug("Bookmark toggle for recipe %d ignored: not logged in", recipe_id)
            return None

        try:
            bookmarked = self.client.toggle_bookmark(recipe_id, token)
        except FoodlyError as e:
            logger.warning("Bookmark toggle for recipe %d failed: %s", recipe_id, e)
            raise

        in_list = self.query_cache.apply_bookmark(recipe_id, bookmarked)
        in_detail = self.entity_cache.apply_bookmark(recipe_id, bookmarked)
        logger.info(
            "Recipe %d bookmarked=%s (list updated=%s, detail updated=%s)",
            recipe_id, bookmarked, in_list, in_detail,
        )
        return bookmarked

    def list_bookmarked(self, page: int = 1, per_page: int = 12) -> Pagination[Recipe]:
        """
        Fetch the current user's bookmarked recipes.

        Raises:
            AuthError: Not logged in, or the token was refused
            FetchError / NetworkError: Request failed
        """
        token = self._session.active_token
        if token is None:
            raise AuthError("Please log in to see your bookmarked recipes.")
        return self.client.list_bookmarks(token, page=page, per_page=per_page)
