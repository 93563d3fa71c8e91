"""
Query cache: the recipe list and its search parameters.

QueryCache owns the search text, the selected tags, the fetched recipe records and the
CacheMarker of the last successful fetch. Every change to the search state recomputes
the backend URL and refetches only when the RequestGate says so.

Refresh flow: set_query()/set_filter() -> refresh() -> build_recipes_url() ->
RequestGate.should_fetch() -> ApiClient.fetch_recipe_page() -> records replace recipes

Identity is pushed in with set_session(); the cache never refreshes by itself when the
session changes. The caller re-invokes refresh() (RecipeBrowser does this).

Fetch failures never propagate: the marker is cleared, the previous records stay, and a
diagnostic is logged. The next trigger retries because the marker is gone.

Each issued fetch gets a generation number. A response is applied only if no newer fetch
was issued in the meantime, so a slow earlier request can never overwrite newer data.
"""

import logging
from typing import Iterable, List, Optional, Tuple
from urllib.parse import quote, urlencode

from foodly.api_client import ApiClient
from foodly.config import CacheConfig
from foodly.errors import FoodlyError
from foodly.models import CacheMarker, Recipe, SearchState, Session, Tag
from foodly.utils.clock import Clock, now_ms
from foodly.utils.gate import RequestGate, is_marker_fresh

logger = logging.getLogger(__name__)


def build_recipes_url(
    base_url: str,
    query: Optional[str],
    tags: Iterable[Tag],
    page: int = 1,
    per_page: int = 12,
) -> str:
    """
    Build the list/search URL for a search state.

    Args:
        base_url: Backend URL without trailing slash
        query: Search text; None or "" means no text search
        tags: Selected filter tags, one tags[] parameter each (in selection order)
        page: Page sent with text searches
        per_page: Page size sent with text searches

    Returns:
        - {base}/recipes/search/{query}?page=..&per_page=..[&tags[]=..] for a text search
        - {base}/recipes?tags[]=.. when only tags are selected
        - {base}/recipes when both are empty

    Examples:
        >>> build_recipes_url("http://api", None, [])
        'http://api/recipes'
        >>> build_recipes_url("http://api", "pizza", [])
        'http://api/recipes/search/pizza?page=1&per_page=12'
    """
    params: List[Tuple[str, object]] = []
    path = f"{base_url}/recipes"

    if query:
        path = f"{path}/search/{quote(query, safe='')}"
        params.append(("page", page))
        params.append(("per_page", per_page))

    for tag in tags:
        params.append(("tags[]", tag.slug))

    if not params:
        return path
    return f"{path}?{urlencode(params, safe='[]')}"


class QueryCache:
    """
    Owner of the displayed recipe collection.

    Attributes:
        client: ApiClient used for list/search requests
        gate: RequestGate of this store
        per_page: Page size for text searches
    """

    def __init__(
        self,
        client: ApiClient,
        session: Optional[Session] = None,
        gate: Optional[RequestGate] = None,
        clock: Clock = now_ms,
        per_page: Optional[int] = None,
    ) -> None:
        self.client = client
        self.gate = gate or RequestGate()
        self.per_page = per_page if per_page is not None else CacheConfig.get_per_page()
        self._clock = clock
        self._session = session or Session()
        self._search = SearchState()
        self._recipes: List[Recipe] = []
        self._last_marker: Optional[CacheMarker] = None
        self._is_loading = False
        self._generation = 0

    @property
    def search(self) -> SearchState:
        return self._search

    @property
    def recipes(self) -> List[Recipe]:
        """Current records (a copy; mutate through QueryCache methods only)."""
        return list(self._recipes)

    @property
    def last_marker(self) -> Optional[CacheMarker]:
        return self._last_marker

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def session(self) -> Session:
        return self._session

    @property
    def is_current(self) -> bool:
        """True if the records were fetched for the current URL and identity and are not stale."""
        return is_marker_fresh(
            self._last_marker,
            self.current_url(),
            self._session.active_token,
            self._clock(),
            self.gate.stale_window_ms,
        )

    def set_session(self, session: Session) -> None:
        """Push the current identity. Takes effect at the next refresh()."""
        self._session = session

    def set_query(self, query: Optional[str], force: bool = False) -> bool:
        """Replace the search text and refresh. Returns whether new records were applied."""
        self._search = self._search.model_copy(update={"query": query})
        return self.refresh(force=force)

    def set_filter(self, tags: Iterable[Tag], force: bool = False) -> bool:
        """Replace the selected tags and refresh. Returns whether new records were applied."""
        self._search = self._search.model_copy(update={"filter": list(tags)})
        return self.refresh(force=force)

    def current_url(self) -> str:
        return build_recipes_url(
            self.client.base_url,
            self._search.query,
            self._search.filter,
            per_page=self.per_page,
        )

    def refresh(self, force: bool = False) -> bool:
        """
        Refetch the collection if the gate requires it.

        Args:
            force: Bypass burst suppression; a fresh marker still prevents the fetch

        Returns:
            True if a fetch was issued and its records were applied; False if the gate
            skipped the fetch, the fetch failed, or its response was superseded
        """
        url = self.current_url()
        token = self._session.active_token
        now = self._clock()

        if not self.gate.should_fetch(self._last_marker, url, token, now, force=force):
            logger.debug("Recipe list fetch skipped for %s (fresh marker or burst)", url)
            return False

        self.gate.mark_started(now)
        self._generation += 1
        generation = self._generation
        self._is_loading = True
        logger.info("Fetching recipes: %s (authenticated=%s)", url, token is not None)

        try:
            page = self.client.fetch_recipe_page(url, token=token)
        except FoodlyError as e:
            if generation == self._generation:
                self._last_marker = None
            logger.warning("Recipe list fetch failed for %s: %s", url, e)
            return False
        finally:
            if generation == self._generation:
                self._is_loading = False

        if generation != self._generation:
            logger.debug("Discarding superseded recipe list response for %s", url)
            return False

        self._recipes = list(page.records)
        self._last_marker = CacheMarker(url=url, token=token, fetched_at_ms=self._clock())
        logger.info("Loaded %d recipes (total=%d)", len(page.records), page.total)
        return True

    def find(self, recipe_id: int) -> Optional[Recipe]:
        """Return the cached record with this id, if any."""
        for recipe in self._recipes:
            if recipe.id == recipe_id:
                return recipe
        return None

    def apply_bookmark(self, recipe_id: int, bookmarked: bool) -> bool:
        """
        Set the bookmark state of the cached record with this id.

        Returns:
            True if a record was updated
        """
        updated = False
        records: List[Recipe] = []
        for recipe in self._recipes:
            if recipe.id == recipe_id:
                recipe = recipe.with_bookmark(bookmarked)
                updated = True
            records.append(recipe)
        self._recipes = records
        return updated
