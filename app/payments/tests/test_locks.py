"""
Tests for distributed locking utilities.

Tests the DistributedLock class which serializes refund execution per order
across processes. Redis is mocked by the autouse ``mock_redis`` fixture.
"""

import uuid

import pytest

from payments.exceptions import LockAcquisitionError
from payments.locks import DistributedLock


class TestDistributedLock:
    """Tests for DistributedLock class."""

    def test_acquire_success(self, mock_redis):
        """Should acquire lock when available."""
        mock_redis.set.return_value = True

        lock = DistributedLock("test:key", ttl=30, blocking=False)
        result = lock.acquire()

        assert result is True
        assert lock.is_held is True
        mock_redis.set.assert_called_once()
        # Verify set was called with correct args: key, token, nx=True, ex=ttl
        call_args = mock_redis.set.call_args
        assert call_args[0][0] == "lock:test:key"
        assert call_args[1]["nx"] is True
        assert call_args[1]["ex"] == 30

    def test_acquire_generates_unique_token(self, mock_redis):
        """Should generate unique token for each acquisition."""
        lock1 = DistributedLock("test:key1", ttl=30, blocking=False)
        lock2 = DistributedLock("test:key2", ttl=30, blocking=False)

        lock1.acquire()
        lock2.acquire()

        assert lock1._token is not None
        assert lock2._token is not None
        assert lock1._token != lock2._token

    def test_acquire_non_blocking_raises_when_held(self, mock_redis):
        """Non-blocking mode should raise immediately if lock unavailable."""
        mock_redis.set.return_value = False

        lock = DistributedLock("test:key", ttl=30, blocking=False)

        with pytest.raises(LockAcquisitionError) as exc_info:
            lock.acquire()

        assert "already held" in str(exc_info.value)
        assert exc_info.value.details["key"] == "lock:test:key"
        assert lock.is_held is False
        mock_redis.set.assert_called_once()

    def test_acquire_blocking_waits_and_acquires(self, mock_redis):
        """Blocking mode should wait and eventually acquire."""
        # First two attempts fail, third succeeds
        mock_redis.set.side_effect = [False, False, True]

        lock = DistributedLock("test:key", ttl=30, blocking=True, timeout=1.0)
        result = lock.acquire()

        assert result is True
        assert mock_redis.set.call_count == 3

    def test_acquire_blocking_timeout_raises_error(self, mock_redis):
        """Should raise after timeout in blocking mode."""
        mock_redis.set.return_value = False

        lock = DistributedLock("test:key", ttl=30, blocking=True, timeout=0.1)

        with pytest.raises(LockAcquisitionError) as exc_info:
            lock.acquire()

        assert "within 0.1s" in str(exc_info.value)
        assert exc_info.value.details["key"] == "lock:test:key"
        assert exc_info.value.details["timeout"] == 0.1
        assert exc_info.value.error_code == "LOCK_ACQUISITION_FAILED"
        assert lock.is_held is False

    def test_release_success(self, mock_redis):
        """Should release lock when we hold it."""
        lock = DistributedLock("test:key", ttl=30, blocking=False)
        lock.acquire()
        token = lock._token
        result = lock.release()

        assert result is True
        assert lock.is_held is False
        # Lua script compares the stored token before deleting
        mock_redis.eval.assert_called_once_with(
            DistributedLock.RELEASE_SCRIPT, 1, "lock:test:key", token
        )

    def test_release_only_if_owned(self, mock_redis):
        """Should only release lock if we own it (token matches)."""
        mock_redis.eval.return_value = 0  # Script returns 0 = token didn't match

        lock = DistributedLock("test:key", ttl=30, blocking=False)
        lock.acquire()
        result = lock.release()

        assert result is False
        assert lock.is_held is False

    def test_release_without_acquire_returns_false(self, mock_redis):
        """Should return False if release called without acquire."""
        lock = DistributedLock("test:key", ttl=30, blocking=False)
        result = lock.release()

        assert result is False
        mock_redis.eval.assert_not_called()

    def test_release_after_failed_acquire_is_noop(self, mock_redis):
        mock_redis.set.return_value = False
        lock = DistributedLock("test:key", ttl=30, blocking=False)

        with pytest.raises(LockAcquisitionError):
            lock.acquire()

        assert lock.release() is False
        mock_redis.eval.assert_not_called()

    def test_context_manager_success(self, mock_redis):
        """Should work as context manager."""
        executed = False
        with DistributedLock("test:key", ttl=30) as lock:
            executed = True
            assert lock.is_held is True

        assert executed is True
        mock_redis.set.assert_called_once()
        mock_redis.eval.assert_called_once()

    def test_context_manager_releases_on_exception(self, mock_redis):
        """Should release lock even if exception occurs inside context."""
        with pytest.raises(ValueError, match="Test error"):
            with DistributedLock("test:key", ttl=30):
                raise ValueError("Test error")

        mock_redis.eval.assert_called_once()

    def test_is_held_property(self, mock_redis):
        """is_held should reflect lock ownership state."""
        lock = DistributedLock("test:key", ttl=30, blocking=False)

        assert lock.is_held is False

        lock.acquire()
        assert lock.is_held is True

        lock.release()
        assert lock.is_held is False


class TestRefundLock:
    """Tests for the per-order refund lock factory."""

    def test_key_is_scoped_to_order(self, mock_redis):
        order_id = uuid.uuid4()

        DistributedLock.for_refund(order_id).acquire()

        assert mock_redis.set.call_args[0][0] == f"lock:refund:execute:{order_id}"

    def test_uses_refund_lock_settings(self, settings):
        settings.REFUND_LOCK_TTL_SECONDS = 90
        settings.REFUND_LOCK_TIMEOUT_SECONDS = 2.5

        lock = DistributedLock.for_refund("abc")

        assert lock.ttl == 90
        assert lock.timeout == 2.5
        assert lock.blocking is True

    def test_different_orders_do_not_share_a_key(self):
        first = DistributedLock.for_refund(uuid.uuid4())
        second = DistributedLock.for_refund(uuid.uuid4())

        assert first.key != second.key
