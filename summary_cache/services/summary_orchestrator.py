"""
Request orchestrator for summary generation and polling.

Composes URL normalization, fingerprinting, the summary repository, the
dedup lock and the correlation table into the generate and fetch state
machines. All coordination state lives in the expiring store; the
orchestrator itself holds no per-request state and is safe to share across
invocations of a warm Lambda container.
"""

from typing import Optional

from .content_extractor import ContentExtractor
from .fingerprint import fingerprint as compute_fingerprint
from .inference_provider import InferenceProvider
from .url_normalizer import normalize_url
from ..data_access.correlation_table import CorrelationTable
from ..data_access.dedup_lock import DedupLock
from ..data_access.exceptions import StoreError
from ..data_access.summary_repository import SummaryRepository
from ..exceptions import InternalError, ProviderError, ValidationError
from ..models.outcomes import (
    Complete,
    FetchOutcome,
    GenerateOutcome,
    Pending,
    Processing,
    Unknown,
)
from ..models.summary import CorrelationEntry
from ..utils.metrics import MetricsPublisher
from ..utils.structured_logger import (
    LoggingContext,
    StructuredLogger,
    get_structured_logger,
)


class SummaryOrchestrator:
    """
    Answers generate and fetch requests.

    Generate short-circuits on the first of: cached via URL index, cached via
    fingerprint, no text (validation error), lock held by someone else
    (pending). Otherwise this request takes the lock, submits the job to the
    provider and records the job for the completion callback (processing).

    Fetch is read-only apart from repairing the URL index on a hit.
    """

    def __init__(
        self,
        repository: SummaryRepository,
        lock: DedupLock,
        correlations: CorrelationTable,
        extractor: ContentExtractor,
        provider: Optional[InferenceProvider] = None,
        metrics: Optional[MetricsPublisher] = None,
        logger: Optional[StructuredLogger] = None
    ):
        """
        Initialize orchestrator.

        Args:
            repository: Cache Entry and URL Index access
            lock: Dedup lock
            correlations: Correlation table for provider jobs
            extractor: Content extractor for raw HTML
            provider: Inference provider; only needed by generate
            metrics: Optional metrics publisher
            logger: Optional structured logger
        """
        self.repository = repository
        self.lock = lock
        self.correlations = correlations
        self.extractor = extractor
        self.provider = provider
        self.metrics = metrics
        self.logger = logger or get_structured_logger('SummaryOrchestrator')

    def generate(
        self,
        url: Optional[str],
        headline: Optional[str] = None,
        html: Optional[str] = None,
        snippet: Optional[str] = None
    ) -> GenerateOutcome:
        """
        Return a cached summary or make sure one is being generated.

        Args:
            url: Article URL (required)
            headline: Article headline as supplied by the client
            html: Raw page HTML for text extraction
            snippet: Client-supplied article text, used when extraction
                is unavailable or yields less

        Returns:
            Complete, Processing or Pending

        Raises:
            ValidationError: If url is missing or no article text is available
            InternalError: If the provider rejects the job or a store write fails
        """
        if not isinstance(url, str) or not url.strip():
            raise ValidationError('URL is required', field='url')

        normalized_url = normalize_url(url.strip())
        headline = (headline or '').strip()

        # fast path: URL alias already resolved to a finished summary
        indexed_fingerprint = self.repository.get_fingerprint_for_url(normalized_url)
        if indexed_fingerprint:
            entry = self.repository.get_summary(indexed_fingerprint)
            if entry:
                self.logger.info(
                    'Cache hit via URL index',
                    operation='generate',
                    fingerprint=indexed_fingerprint
                )
                self._emit('emit_cache_hit', 'url_index')
                return Complete(fingerprint=indexed_fingerprint, entry=entry)

        text = self.extractor.extract(html, normalized_url, snippet)
        fingerprint = compute_fingerprint(normalized_url, headline, text)
        log = self.logger.bind(fingerprint=fingerprint)

        entry = self.repository.get_summary(fingerprint)
        if entry:
            log.info('Cache hit via fingerprint', operation='generate', url=normalized_url)
            self._backfill_url_index(normalized_url, fingerprint, log)
            self._emit('emit_cache_hit', 'fingerprint')
            return Complete(fingerprint=fingerprint, entry=entry)

        self._emit('emit_cache_miss')

        if not text or not text.strip():
            log.warning('No article text available', operation='generate', url=normalized_url)
            raise ValidationError('No article content available to summarize', field='text')

        if self.provider is None:
            raise InternalError('No inference provider configured')

        try:
            token = self.lock.try_acquire(fingerprint)
        except StoreError as e:
            log.error('Failed to acquire dedup lock', operation='generate', error=e)
            raise InternalError('Failed to coordinate summary generation') from e

        if token is None:
            log.info('Generation already in flight', operation='generate')
            self._emit('emit_generation_pending')
            return Pending(fingerprint=fingerprint)

        display_title = headline or self.extractor.extract_title(html) or ''
        return self._submit(fingerprint, token, text, display_title, normalized_url, log)

    def _submit(
        self,
        fingerprint: str,
        token: str,
        text: str,
        display_title: str,
        normalized_url: str,
        log: StructuredLogger
    ) -> Processing:
        try:
            with LoggingContext(log, 'provider_submit'):
                job = self.provider.submit(text, display_title or None)
        except ProviderError as e:
            self._emit('emit_provider_failure')
            self._release_quietly(fingerprint, token, log)
            raise InternalError(f'Failed to start summary generation: {e}') from e

        log = log.bind(job_id=job.job_id)

        correlation = CorrelationEntry(
            fingerprint=fingerprint,
            displayTitle=display_title,
            normalizedUrl=normalized_url,
            lockToken=token
        )
        try:
            self.correlations.record(job.job_id, correlation)
        except StoreError as e:
            log.error('Failed to record provider job', operation='generate', error=e)
            self._release_quietly(fingerprint, token, log)
            raise InternalError('Failed to record summary generation job') from e

        log.log_state_change('summaryStatus', 'unknown', 'processing')
        self._emit('emit_generation_triggered')
        return Processing(fingerprint=fingerprint, job_id=job.job_id)

    def fetch(
        self,
        fingerprint: Optional[str] = None,
        url: Optional[str] = None
    ) -> FetchOutcome:
        """
        Report the state of a summary without starting generation.

        Args:
            fingerprint: Content fingerprint, if known
            url: Article URL, resolved through the URL index

        Returns:
            Complete, Pending or Unknown

        Raises:
            ValidationError: If neither fingerprint nor url is given
        """
        fingerprint = (fingerprint or '').strip() or None
        url = (url or '').strip() or None
        if not fingerprint and not url:
            raise ValidationError('fingerprint or url is required', field='fingerprint')

        normalized_url = normalize_url(url) if url else None

        resolved = fingerprint
        if not resolved:
            resolved = self.repository.get_fingerprint_for_url(normalized_url)
            if not resolved:
                self.logger.debug('URL not indexed', operation='fetch', url=normalized_url)
                return Unknown()

        log = self.logger.bind(fingerprint=resolved)

        entry = self.repository.get_summary(resolved)
        if entry:
            if fingerprint and normalized_url:
                self._backfill_url_index(normalized_url, resolved, log)
            self._emit('emit_cache_hit', 'fetch')
            return Complete(fingerprint=resolved, entry=entry)

        if self.lock.is_held(resolved):
            return Pending(fingerprint=resolved)

        return Unknown(fingerprint=resolved)

    def _backfill_url_index(self, normalized_url: str, fingerprint: str, log: StructuredLogger) -> None:
        # repair only; a failed write leaves the slower fingerprint path working
        try:
            self.repository.index_url(normalized_url, fingerprint)
        except StoreError as e:
            log.warning(
                'URL index backfill failed',
                operation='backfill_url_index',
                url=normalized_url,
                error_message=str(e)
            )

    def _release_quietly(self, fingerprint: str, token: str, log: StructuredLogger) -> None:
        try:
            self.lock.release(fingerprint, token)
        except StoreError as e:
            log.error('Failed to release dedup lock', operation='release_lock', error=e)

    def _emit(self, method_name: str, *args) -> None:
        if self.metrics is not None:
            getattr(self.metrics, method_name)(*args)
