"""
Repository for finished summaries and the URL alias index.
"""
import logging
from typing import Optional

from .expiring_store import ExpiringStore
from ..config.settings import CACHE_ENTRY_TTL_SECONDS, URL_INDEX_TTL_SECONDS
from ..models.summary import CacheEntry

logger = logging.getLogger(__name__)

ARTICLE_KEY_PREFIX = 'article:'
URL_KEY_PREFIX = 'url:'


class SummaryRepository:
    """
    Reads and writes Cache Entries (by fingerprint) and URL Index Entries
    (canonical URL to fingerprint).
    """

    def __init__(
        self,
        store: ExpiringStore,
        cache_ttl_seconds: int = CACHE_ENTRY_TTL_SECONDS,
        url_ttl_seconds: int = URL_INDEX_TTL_SECONDS
    ):
        """
        Initialize the repository.

        Args:
            store: Expiring store
            cache_ttl_seconds: Lifetime of a Cache Entry
            url_ttl_seconds: Lifetime of a URL Index Entry
        """
        self.store = store
        self.cache_ttl_seconds = cache_ttl_seconds
        self.url_ttl_seconds = url_ttl_seconds

    def get_summary(self, fingerprint: str) -> Optional[CacheEntry]:
        """
        Get the stored summary for a fingerprint.

        Returns:
            CacheEntry or None if absent or unreadable
        """
        raw = self.store.get(f"{ARTICLE_KEY_PREFIX}{fingerprint}")
        if raw is None:
            return None
        try:
            return CacheEntry.from_json(raw)
        except ValueError as e:
            logger.warning(f"Ignoring unreadable cache entry for {fingerprint}: {e}")
            return None

    def store_summary(self, fingerprint: str, entry: CacheEntry) -> bool:
        """
        Store a summary unless one already exists.

        Cache Entries are immutable: the first stored result for a
        fingerprint wins.

        Returns:
            True if this call stored the entry

        Raises:
            StoreTransportError: If the write fails
        """
        stored = self.store.set_if_absent(
            f"{ARTICLE_KEY_PREFIX}{fingerprint}",
            entry.to_json(),
            self.cache_ttl_seconds
        )
        if not stored:
            logger.info(f"Summary for {fingerprint} already stored, keeping existing entry")
        return stored

    def get_fingerprint_for_url(self, normalized_url: str) -> Optional[str]:
        return self.store.get(f"{URL_KEY_PREFIX}{normalized_url}")

    def index_url(self, normalized_url: str, fingerprint: str) -> None:
        """
        Point a canonical URL at a fingerprint, refreshing its TTL.

        Raises:
            StoreTransportError: If the write fails
        """
        self.store.set(f"{URL_KEY_PREFIX}{normalized_url}", fingerprint, self.url_ttl_seconds)
