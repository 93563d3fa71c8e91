"""
Tag catalog with a time-based cache.

The tag list changes rarely, so it is fetched once and kept for a TTL instead of being
requested for every filter change. resolve() turns slugs (e.g. from a saved filter or
command line) into the Tag objects QueryCache.set_filter() expects.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from foodly.api_client import ApiClient
from foodly.config import CacheConfig
from foodly.models import Tag
from foodly.utils.clock import Clock, now_ms

logger = logging.getLogger(__name__)


class TagCatalog:
    """
    Cached view of GET /tags.

    Attributes:
        ttl_seconds: Lifetime of a fetched tag list
    """

    def __init__(
        self,
        client: ApiClient,
        ttl_seconds: Optional[int] = None,
        clock: Clock = now_ms,
    ) -> None:
        self.client = client
        self._clock = clock
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else CacheConfig.get_tags_ttl_seconds()
        # (fetched_at_ms, tags)
        self._entry: Optional[Tuple[int, List[Tag]]] = None

    def get_tags(self) -> List[Tag]:
        """
        Return all tags, fetching them if the cached list is missing or expired.

        Raises:
            FetchError / NetworkError: The tag list could not be fetched
        """
        now = self._clock()
        if self._entry is not None:
            timestamp, tags = self._entry
            if now - timestamp <= self.ttl_seconds * 1000:
                return list(tags)
            logger.debug("Tag cache expired")

        tags = self.client.list_tags()
        self._entry = (now, tags)
        logger.info("Loaded %d tags", len(tags))
        return list(tags)

    def resolve(self, slugs: Iterable[str]) -> List[Tag]:
        """
        Map slugs to tags, preserving the given order.

        Unknown slugs are skipped with a warning.
        """
        by_slug = {tag.slug: tag for tag in self.get_tags()}
        resolved: List[Tag] = []
        for slug in slugs:
            tag = by_slug.get(slug)
            if tag is None:
                logger.warning("Unknown tag slug %r ignored", slug)
                continue
            if tag not in resolved:
                resolved.append(tag)
        return resolved

    def clear(self) -> None:
        """Drop the cached list (useful for testing)."""
        self._entry = None
