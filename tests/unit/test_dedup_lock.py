"""
Unit tests for the dedup lock.
"""

from unittest.mock import Mock

import pytest

from summary_cache.data_access import DedupLock, StoreTransportError


class TestDedupLock:
    """Test suite for DedupLock."""

    def test_key_namespace(self):
        assert DedupLock.key_for('abc') == 'lock:abc'

    def test_acquire_returns_owner_token(self, dedup_lock, store):
        token = dedup_lock.try_acquire('fp')
        assert token
        assert store.get('lock:fp') == token

    def test_only_one_acquirer(self, dedup_lock):
        """Test that a second acquisition attempt fails while the lock is held."""
        assert dedup_lock.try_acquire('fp') is not None
        assert dedup_lock.try_acquire('fp') is None
        assert dedup_lock.try_acquire('other-fp') is not None

    def test_tokens_are_unique(self, dedup_lock):
        first = dedup_lock.try_acquire('fp-1')
        second = dedup_lock.try_acquire('fp-2')
        assert first != second

    def test_is_held(self, dedup_lock):
        assert dedup_lock.is_held('fp') is False
        dedup_lock.try_acquire('fp')
        assert dedup_lock.is_held('fp') is True

    def test_release_allows_reacquire(self, dedup_lock):
        token = dedup_lock.try_acquire('fp')
        assert dedup_lock.release('fp', token) is True
        assert dedup_lock.is_held('fp') is False
        assert dedup_lock.try_acquire('fp') is not None

    def test_lease_expires_after_60_seconds(self, dedup_lock, clock):
        """Test that a crashed holder blocks the fingerprint for at most the lease."""
        dedup_lock.try_acquire('fp')
        clock.advance(59)
        assert dedup_lock.try_acquire('fp') is None
        clock.advance(1)
        assert dedup_lock.try_acquire('fp') is not None

    def test_stale_token_does_not_release_new_holder(self, dedup_lock, clock):
        """Test that a release from an expired holder leaves the new lock alone."""
        stale = dedup_lock.try_acquire('fp')
        clock.advance(61)
        fresh = dedup_lock.try_acquire('fp')

        assert dedup_lock.release('fp', stale) is False
        assert dedup_lock.is_held('fp') is True
        assert dedup_lock.release('fp', fresh) is True

    def test_release_without_token_is_unconditional(self, dedup_lock):
        dedup_lock.try_acquire('fp')
        assert dedup_lock.release('fp') is True

    def test_release_missing_lock_returns_false(self, dedup_lock):
        assert dedup_lock.release('fp', 'token') is False

    def test_acquire_propagates_store_errors(self):
        """Test that a failed conditional write is not mistaken for contention."""
        store = Mock()
        store.set_if_absent.side_effect = StoreTransportError('down')
        with pytest.raises(StoreTransportError):
            DedupLock(store).try_acquire('fp')
