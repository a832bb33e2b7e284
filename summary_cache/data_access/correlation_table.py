"""
Correlation table mapping provider job ids back to fingerprints.
"""
import logging
from typing import Optional

from .expiring_store import ExpiringStore
from ..config.settings import CORRELATION_TTL_SECONDS
from ..models.summary import CorrelationEntry

logger = logging.getLogger(__name__)

JOB_KEY_PREFIX = 'job:'


class CorrelationTable:
    """
    Bookkeeping for in-flight provider jobs.
    """

    def __init__(self, store: ExpiringStore, ttl_seconds: int = CORRELATION_TTL_SECONDS):
        """
        Initialize the table.

        Args:
            store: Expiring store
            ttl_seconds: How long an unanswered job stays resolvable
        """
        self.store = store
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def key_for(job_id: str) -> str:
        return f"{JOB_KEY_PREFIX}{job_id}"

    def record(self, job_id: str, entry: CorrelationEntry) -> None:
        """
        Record a job accepted by the provider.

        Raises:
            StoreTransportError: If the write fails
        """
        self.store.set(self.key_for(job_id), entry.to_json(), self.ttl_seconds)
        logger.info(f"Recorded job {job_id} for fingerprint {entry.fingerprint}")

    def resolve(self, job_id: str) -> Optional[CorrelationEntry]:
        """
        Look up a job.

        Returns:
            CorrelationEntry, or None for an unknown, expired or already
            consumed job
        """
        raw = self.store.get(self.key_for(job_id))
        if raw is None:
            return None
        try:
            return CorrelationEntry.from_json(raw)
        except ValueError as e:
            logger.warning(f"Discarding unreadable correlation entry for job {job_id}: {e}")
            return None

    def forget(self, job_id: str) -> bool:
        """
        Remove a consumed job.

        Raises:
            StoreTransportError: If the delete fails
        """
        return self.store.delete(self.key_for(job_id))
