"""
Unit tests for the request orchestrator.

Store-backed collaborators run against moto; the extractor and provider are
mocks so each test controls text resolution and job submission.
"""

import threading
from unittest.mock import Mock

import pytest

from summary_cache.data_access import StoreTransportError
from summary_cache.exceptions import InternalError, ProviderError, ValidationError
from summary_cache.models import (
    CacheEntry,
    Complete,
    Pending,
    Processing,
    SummaryStatus,
    Unknown,
)
from summary_cache.services import (
    HtmlContentExtractor,
    ProviderJob,
    ReplicateClient,
    SummaryOrchestrator,
    fingerprint,
)
from summary_cache.utils import MetricsPublisher

URL = 'https://m.example.com/a?utm_source=x'
CANONICAL_URL = 'https://example.com/a'


@pytest.fixture
def extractor():
    """Extractor that falls back to the snippet like the real one."""
    mock = Mock(spec=HtmlContentExtractor)
    mock.extract.side_effect = lambda html, url, snippet=None: snippet or ''
    mock.extract_title.return_value = None
    return mock


@pytest.fixture
def provider():
    mock = Mock(spec=ReplicateClient)
    mock.submit.return_value = ProviderJob(job_id='job-1', status='starting')
    return mock


@pytest.fixture
def metrics():
    return Mock(spec=MetricsPublisher)


@pytest.fixture
def orchestrator(repository, dedup_lock, correlations, extractor, provider, metrics):
    return SummaryOrchestrator(
        repository=repository,
        lock=dedup_lock,
        correlations=correlations,
        extractor=extractor,
        provider=provider,
        metrics=metrics
    )


def _store_summary(repository, fp, text='Result text'):
    entry = CacheEntry(summaryText=text, displayTitle='H', providerTag='model')
    repository.store_summary(fp, entry)
    return entry


class TestGenerate:
    """Test suite for the generate state machine."""

    def test_missing_url_is_validation_error(self, orchestrator, provider):
        with pytest.raises(ValidationError) as exc_info:
            orchestrator.generate(url=None, headline='H', snippet='S')
        assert exc_info.value.field == 'url'
        provider.submit.assert_not_called()

    def test_first_request_triggers_generation(self, orchestrator, provider, correlations, dedup_lock):
        """Test that a fresh fingerprint takes the lock and submits one job."""
        outcome = orchestrator.generate(url=URL, headline='H', snippet='S')

        expected_fp = fingerprint(CANONICAL_URL, 'H', 'S')
        assert outcome == Processing(fingerprint=expected_fp, job_id='job-1')
        assert outcome.status == SummaryStatus.PROCESSING
        provider.submit.assert_called_once_with('S', 'H')

        correlation = correlations.resolve('job-1')
        assert correlation.fingerprint == expected_fp
        assert correlation.displayTitle == 'H'
        assert correlation.normalizedUrl == CANONICAL_URL
        assert correlation.lockToken
        assert dedup_lock.is_held(expected_fp)

    def test_second_request_is_pending(self, orchestrator, provider):
        """Test that a repeat request while the job is in flight is pending."""
        first = orchestrator.generate(url=URL, headline='H', snippet='S')
        second = orchestrator.generate(url=URL, headline='H', snippet='S')

        assert isinstance(first, Processing)
        assert second == Pending(fingerprint=first.fingerprint)
        assert provider.submit.call_count == 1

    def test_concurrent_callers_submit_one_job(self, orchestrator, provider, dedup_lock):
        """Test that simultaneous duplicates yield one processing and the rest pending."""
        callers = 8
        barrier = threading.Barrier(callers)
        outcomes = []
        errors = []
        results_lock = threading.Lock()

        def call_generate():
            barrier.wait()
            try:
                outcome = orchestrator.generate(url=URL, headline='H', snippet='S')
            except Exception as e:
                with results_lock:
                    errors.append(e)
                return
            with results_lock:
                outcomes.append(outcome)

        threads = [threading.Thread(target=call_generate) for _ in range(callers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        expected_fp = fingerprint(CANONICAL_URL, 'H', 'S')
        assert errors == []
        assert len(outcomes) == callers
        assert provider.submit.call_count == 1
        assert [type(o) for o in outcomes].count(Processing) == 1
        assert outcomes.count(Pending(fingerprint=expected_fp)) == callers - 1
        assert dedup_lock.is_held(expected_fp)

    def test_cached_via_url_index(self, orchestrator, repository, extractor, provider):
        """Test the fast path: URL index hit with a live cache entry."""
        entry = _store_summary(repository, 'fp-indexed')
        repository.index_url(CANONICAL_URL, 'fp-indexed')

        outcome = orchestrator.generate(url=URL, headline='H', snippet='S')

        assert outcome == Complete(fingerprint='fp-indexed', entry=entry)
        extractor.extract.assert_not_called()
        provider.submit.assert_not_called()

    def test_cached_via_fingerprint_backfills_url_index(self, orchestrator, repository, provider):
        """Test that a fingerprint hit repairs the URL alias."""
        fp = fingerprint(CANONICAL_URL, 'H', 'S')
        entry = _store_summary(repository, fp)

        outcome = orchestrator.generate(url=URL, headline='H', snippet='S')

        assert outcome == Complete(fingerprint=fp, entry=entry)
        assert repository.get_fingerprint_for_url(CANONICAL_URL) == fp
        provider.submit.assert_not_called()

    def test_stale_url_index_falls_through(self, orchestrator, repository, provider):
        """Test that an index entry pointing at an expired summary re-resolves."""
        repository.index_url(CANONICAL_URL, 'fp-expired')

        outcome = orchestrator.generate(url=URL, headline='H', snippet='S')

        assert isinstance(outcome, Processing)
        provider.submit.assert_called_once()

    def test_cache_entry_wins_over_stale_lock(self, orchestrator, repository, dedup_lock):
        fp = fingerprint(CANONICAL_URL, 'H', 'S')
        dedup_lock.try_acquire(fp)
        _store_summary(repository, fp)

        assert isinstance(orchestrator.generate(url=URL, headline='H', snippet='S'), Complete)

    def test_empty_text_rejected_before_lock(self, orchestrator, provider, dedup_lock):
        """Test that no text means no lock and no provider call."""
        with pytest.raises(ValidationError) as exc_info:
            orchestrator.generate(url=URL, headline='H', snippet='   ')

        assert exc_info.value.field == 'text'
        provider.submit.assert_not_called()
        assert dedup_lock.is_held(fingerprint(CANONICAL_URL, 'H', '')) is False

    def test_provider_failure_releases_lock(self, orchestrator, provider, dedup_lock, metrics):
        """Test fail-fast release so the next caller can retry immediately."""
        provider.submit.side_effect = ProviderError('Replicate API error: 422', status_code=422)

        with pytest.raises(InternalError) as exc_info:
            orchestrator.generate(url=URL, headline='H', snippet='S')

        assert isinstance(exc_info.value.__cause__, ProviderError)
        assert dedup_lock.is_held(fingerprint(CANONICAL_URL, 'H', 'S')) is False
        metrics.emit_provider_failure.assert_called_once()

        provider.submit.side_effect = None
        assert isinstance(orchestrator.generate(url=URL, headline='H', snippet='S'), Processing)

    def test_provider_error_propagates_when_release_fails(self, orchestrator, provider, dedup_lock):
        """Test that a failed release is logged and the provider error still wins."""
        provider.submit.side_effect = ProviderError('boom')
        dedup_lock.release = Mock(side_effect=StoreTransportError('down'))

        with pytest.raises(InternalError) as exc_info:
            orchestrator.generate(url=URL, headline='H', snippet='S')

        assert isinstance(exc_info.value.__cause__, ProviderError)
        dedup_lock.release.assert_called_once()

    def test_correlation_write_failure_releases_lock(self, orchestrator, correlations, dedup_lock):
        correlations.record = Mock(side_effect=StoreTransportError('down'))

        with pytest.raises(InternalError):
            orchestrator.generate(url=URL, headline='H', snippet='S')

        assert dedup_lock.is_held(fingerprint(CANONICAL_URL, 'H', 'S')) is False

    def test_lock_write_failure_is_internal_error(self, orchestrator, dedup_lock, provider):
        dedup_lock.try_acquire = Mock(side_effect=StoreTransportError('down'))

        with pytest.raises(InternalError):
            orchestrator.generate(url=URL, headline='H', snippet='S')
        provider.submit.assert_not_called()

    def test_missing_headline_uses_extracted_title_for_display(
        self, orchestrator, extractor, provider, correlations
    ):
        """Test that the page title labels the summary but not the fingerprint."""
        extractor.extract_title.return_value = 'Page Title'

        outcome = orchestrator.generate(url=URL, html='<html></html>', snippet='S')

        assert outcome.fingerprint == fingerprint(CANONICAL_URL, '', 'S')
        provider.submit.assert_called_once_with('S', 'Page Title')
        assert correlations.resolve('job-1').displayTitle == 'Page Title'

    def test_convergent_urls_share_fingerprint(self, orchestrator, provider):
        """Test that URL aliases with identical content dedupe onto one job."""
        first = orchestrator.generate(url='https://example.com/a', headline='H', snippet='S')
        second = orchestrator.generate(url='https://m.example.com/a/', headline='H', snippet='S')

        assert second == Pending(fingerprint=first.fingerprint)
        assert provider.submit.call_count == 1

    def test_no_provider_configured(self, repository, dedup_lock, correlations, extractor):
        orchestrator = SummaryOrchestrator(repository, dedup_lock, correlations, extractor)
        with pytest.raises(InternalError):
            orchestrator.generate(url=URL, headline='H', snippet='S')
        assert dedup_lock.is_held(fingerprint(CANONICAL_URL, 'H', 'S')) is False


class TestFetch:
    """Test suite for the fetch state machine."""

    def test_requires_fingerprint_or_url(self, orchestrator):
        with pytest.raises(ValidationError):
            orchestrator.fetch()

    def test_unknown_url(self, orchestrator):
        assert orchestrator.fetch(url=URL) == Unknown()

    def test_unknown_fingerprint(self, orchestrator):
        assert orchestrator.fetch(fingerprint='fp') == Unknown(fingerprint='fp')

    def test_pending_while_locked(self, orchestrator, dedup_lock):
        dedup_lock.try_acquire('fp')
        assert orchestrator.fetch(fingerprint='fp') == Pending(fingerprint='fp')

    def test_complete_by_fingerprint(self, orchestrator, repository):
        entry = _store_summary(repository, 'fp')
        assert orchestrator.fetch(fingerprint='fp') == Complete(fingerprint='fp', entry=entry)

    def test_complete_by_url(self, orchestrator, repository):
        entry = _store_summary(repository, 'fp')
        repository.index_url(CANONICAL_URL, 'fp')
        assert orchestrator.fetch(url=URL) == Complete(fingerprint='fp', entry=entry)

    def test_fetch_has_no_side_effects_on_miss(self, orchestrator, provider, dedup_lock):
        orchestrator.fetch(fingerprint='fp', url=URL)
        provider.submit.assert_not_called()
        assert dedup_lock.is_held('fp') is False

    def test_fetch_repairs_url_index_on_hit(self, orchestrator, repository):
        _store_summary(repository, 'fp')
        orchestrator.fetch(fingerprint='fp', url=URL)
        assert repository.get_fingerprint_for_url(CANONICAL_URL) == 'fp'

    def test_to_dict_shapes(self, orchestrator, repository):
        entry = _store_summary(repository, 'fp')
        body = orchestrator.fetch(fingerprint='fp').to_dict()
        assert body == {
            'status': 'complete',
            'cached': True,
            'summary': 'Result text',
            'headline': 'H',
            'completedAt': entry.completedAt,
            'fingerprint': 'fp',
        }
