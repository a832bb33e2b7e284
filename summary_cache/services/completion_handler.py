"""
Completion handler for provider callbacks.

Turns a finished provider job into a Cache Entry and releases the
generation lock. Every path is safe to repeat: a redelivered callback finds
its correlation entry already consumed and is acknowledged without changes.
"""

from typing import Any, Dict, Optional

from ..data_access.correlation_table import CorrelationTable
from ..data_access.dedup_lock import DedupLock
from ..data_access.exceptions import StoreError
from ..data_access.summary_repository import SummaryRepository
from ..exceptions import InternalError
from ..models.summary import CacheEntry, CorrelationEntry
from ..utils.metrics import MetricsPublisher
from ..utils.structured_logger import StructuredLogger, get_structured_logger

DEFAULT_DISPLAY_TITLE = 'Article Summary'

OUTCOME_SUCCEEDED = 'succeeded'
OUTCOME_FAILED = 'failed'


def join_output(output: Any) -> str:
    """
    Flatten provider output into summary text.

    Streaming models return a list of tokens or lines; those are joined with
    newlines. Anything else is converted to a string.
    """
    if output is None:
        return ''
    if isinstance(output, (list, tuple)):
        return '\n'.join(str(part) for part in output if part is not None).strip()
    return str(output).strip()


class CompletionHandler:
    """
    Finalizes provider jobs reported through the webhook.
    """

    def __init__(
        self,
        repository: SummaryRepository,
        lock: DedupLock,
        correlations: CorrelationTable,
        provider_tag: str = '',
        metrics: Optional[MetricsPublisher] = None,
        logger: Optional[StructuredLogger] = None
    ):
        """
        Initialize completion handler.

        Args:
            repository: Cache Entry and URL Index access
            lock: Dedup lock
            correlations: Correlation table for provider jobs
            provider_tag: Model identifier stored on every Cache Entry
            metrics: Optional metrics publisher
            logger: Optional structured logger
        """
        self.repository = repository
        self.lock = lock
        self.correlations = correlations
        self.provider_tag = provider_tag
        self.metrics = metrics
        self.logger = logger or get_structured_logger('CompletionHandler')

    def handle(
        self,
        job_id: Optional[str],
        outcome: Optional[str],
        output: Any = None,
        error: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Process one provider callback.

        Args:
            job_id: Provider job id
            outcome: Provider status ('succeeded', 'failed', or a
                non-terminal status)
            output: Provider output on success
            error: Provider error message on failure

        Returns:
            Acknowledgment body: {received, stored, warning?, error?}

        Raises:
            InternalError: If a store write fails while finalizing; the
                provider's redelivery can then finish the job
        """
        if not job_id:
            self.logger.warning('Callback without job id', operation='handle_callback')
            return {'received': True, 'stored': False, 'warning': 'Missing prediction ID'}

        log = self.logger.bind(job_id=job_id)

        correlation = self.correlations.resolve(job_id)
        if correlation is None:
            log.warning(
                'Callback for unknown or already processed job',
                operation='handle_callback',
                outcome=outcome
            )
            self._emit('unknown_job')
            return {'received': True, 'stored': False, 'warning': 'Unknown prediction ID'}

        log = log.bind(fingerprint=correlation.fingerprint)

        try:
            if outcome == OUTCOME_SUCCEEDED:
                return self._handle_success(job_id, correlation, output, log)
            if outcome == OUTCOME_FAILED:
                return self._handle_failure(job_id, correlation, error, log)
        except StoreError as e:
            log.error('Failed to finalize job', operation='handle_callback', error=e)
            raise InternalError('Failed to finalize summary job') from e

        log.info('Job not finished, nothing to do', operation='handle_callback', outcome=outcome)
        return {'received': True, 'stored': False}

    def _handle_success(
        self,
        job_id: str,
        correlation: CorrelationEntry,
        output: Any,
        log: StructuredLogger
    ) -> Dict[str, Any]:
        summary_text = join_output(output)
        if not summary_text:
            log.warning('Job succeeded without output', operation='handle_callback')
            return self._handle_failure(job_id, correlation, 'Empty output', log)

        entry = CacheEntry(
            summaryText=summary_text,
            displayTitle=correlation.displayTitle or DEFAULT_DISPLAY_TITLE,
            providerTag=self.provider_tag
        )
        self.repository.store_summary(correlation.fingerprint, entry)

        if correlation.normalizedUrl:
            self.repository.index_url(correlation.normalizedUrl, correlation.fingerprint)

        self.correlations.forget(job_id)
        self.lock.release(correlation.fingerprint, correlation.lockToken)

        log.log_state_change('summaryStatus', 'processing', 'complete')
        self._emit('stored')
        return {'received': True, 'stored': True}

    def _handle_failure(
        self,
        job_id: str,
        correlation: CorrelationEntry,
        error: Optional[str],
        log: StructuredLogger
    ) -> Dict[str, Any]:
        log.warning('Provider job failed', operation='handle_callback', provider_error=error)

        self.lock.release(correlation.fingerprint, correlation.lockToken)
        self.correlations.forget(job_id)

        self._emit('failed')
        return {'received': True, 'stored': False, 'error': error or 'Prediction failed'}

    def _emit(self, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.emit_callback_outcome(outcome)
