"""
Deduplication lock scoped to a content fingerprint.
"""
import logging
import uuid
from typing import Optional

from .expiring_store import ExpiringStore
from ..config.settings import DEDUP_LOCK_TTL_SECONDS

logger = logging.getLogger(__name__)

LOCK_KEY_PREFIX = 'lock:'


class DedupLock:
    """
    Create-if-absent lock with a bounded lease.

    The lease TTL only backstops crashed holders; holders release explicitly.
    Each acquisition stores a fresh owner token so that a release can never
    free a lock that has since been re-acquired by someone else.
    """

    def __init__(self, store: ExpiringStore, ttl_seconds: int = DEDUP_LOCK_TTL_SECONDS):
        """
        Initialize the lock.

        Args:
            store: Expiring store providing set_if_absent
            ttl_seconds: Lease length in seconds
        """
        self.store = store
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def key_for(fingerprint: str) -> str:
        return f"{LOCK_KEY_PREFIX}{fingerprint}"

    def try_acquire(self, fingerprint: str) -> Optional[str]:
        """
        Try to take the lock for a fingerprint.

        Args:
            fingerprint: Content fingerprint

        Returns:
            Owner token if acquired, None if another holder has it

        Raises:
            StoreTransportError: If the conditional write fails
        """
        token = uuid.uuid4().hex
        if self.store.set_if_absent(self.key_for(fingerprint), token, self.ttl_seconds):
            logger.info(f"Acquired dedup lock for {fingerprint}")
            return token
        logger.info(f"Dedup lock for {fingerprint} already held")
        return None

    def is_held(self, fingerprint: str) -> bool:
        return self.store.get(self.key_for(fingerprint)) is not None

    def release(self, fingerprint: str, token: Optional[str] = None) -> bool:
        """
        Release the lock.

        Args:
            fingerprint: Content fingerprint
            token: Owner token; when given, only that owner's lock is removed

        Returns:
            True if a live lock was removed

        Raises:
            StoreTransportError: If the delete fails
        """
        released = self.store.delete(self.key_for(fingerprint), expected_value=token)
        if not released:
            logger.info(f"No dedup lock to release for {fingerprint}")
        return released
