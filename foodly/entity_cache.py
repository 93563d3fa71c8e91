"""
Entity cache: the single focused recipe.

The focused recipe is served from QueryCache when the id is part of the current list
(the usual case after navigating from the list), otherwise it is fetched on its own.
Standalone fetches go through their own RequestGate and CacheMarker, with the same
generation rule as QueryCache.

Errors are not raised. They are logged and exposed through `error` so the caller can
render an empty or error state:
- NotFoundError: the focused recipe is cleared
- FetchError / NetworkError: the previous focused recipe is kept
"""

import logging
from typing import Optional

from foodly.api_client import ApiClient
from foodly.errors import FoodlyError, NotFoundError
from foodly.models import CacheMarker, Recipe, Session
from foodly.query_cache import QueryCache
from foodly.utils.clock import Clock, now_ms
from foodly.utils.gate import RequestGate

logger = logging.getLogger(__name__)


class EntityCache:
    """Owner of the focused recipe."""

    def __init__(
        self,
        client: ApiClient,
        query_cache: QueryCache,
        session: Optional[Session] = None,
        gate: Optional[RequestGate] = None,
        clock: Clock = now_ms,
    ) -> None:
        self.client = client
        self.query_cache = query_cache
        self.gate = gate or RequestGate()
        self._clock = clock
        self._session = session or Session()
        self._recipe: Optional[Recipe] = None
        self._last_marker: Optional[CacheMarker] = None
        self._error: Optional[FoodlyError] = None
        self._is_loading = False
        self._generation = 0

    @property
    def recipe(self) -> Optional[Recipe]:
        return self._recipe

    @property
    def error(self) -> Optional[FoodlyError]:
        """Error of the last standalone fetch, None after a success."""
        return self._error

    @property
    def last_marker(self) -> Optional[CacheMarker]:
        return self._last_marker

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def set_session(self, session: Session) -> None:
        """Push the current identity. Takes effect at the next fetch_recipe()."""
        self._session = session

    def fetch_recipe(self, recipe_id: int) -> Optional[Recipe]:
        """
        Focus a recipe.

        Args:
            recipe_id: Id of the recipe to show

        Returns:
            The focused recipe after the call (may be a different recipe, or None, when the
            fetch was suppressed or failed)
        """
        listed = self.query_cache.find(recipe_id)
        if listed is not None:
            # Served from the list: the marker no longer describes the focused recipe
            self._recipe = listed
            self._last_marker = None
            self._error = None
            logger.debug("Recipe %d served from the recipe list", recipe_id)
            return self._recipe

        url = self.client.recipe_url(recipe_id)
        token = self._session.active_token
        now = self._clock()
        if not self.gate.should_fetch(self._last_marker, url, token, now):
            logger.debug("Recipe fetch skipped for %s (fresh marker or burst)", url)
            return self._recipe

        self.gate.mark_started(now)
        self._generation += 1
        generation = self._generation
        self._is_loading = True
        logger.info("Fetching recipe %d (authenticated=%s)", recipe_id, token is not None)

        try:
            recipe = self.client.fetch_recipe(recipe_id, token=token)
        except NotFoundError as e:
            if generation == self._generation:
                self._recipe = None
                self._last_marker = None
                self._error = e
            logger.info("Recipe %d not found", recipe_id)
            return self._recipe
        except FoodlyError as e:
            if generation == self._generation:
                self._last_marker = None
                self._error = e
            logger.warning("Recipe %d fetch failed: %s", recipe_id, e)
            return self._recipe
        finally:
            if generation == self._generation:
                self._is_loading = False

        if generation != self._generation:
            logger.debug("Discarding superseded response for recipe %d", recipe_id)
            return self._recipe

        self._recipe = recipe
        self._last_marker = CacheMarker(url=url, token=token, fetched_at_ms=self._clock())
        self._error = None
        return self._recipe

    def apply_bookmark(self, recipe_id: int, bookmarked: bool) -> bool:
        """
        Set the bookmark state of the focused recipe if its id matches.

        Returns:
            True if the focused recipe was updated
        """
        if self._recipe is None or self._recipe.id != recipe_id:
            return False
        self._recipe = self._recipe.with_bookmark(bookmarked)
        return True
