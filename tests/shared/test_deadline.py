"""Tests for Deadline."""

import time

import pytest

from xkcdvault.shared.deadline import Deadline


class TestDeadline:
    def test_unbounded_deadline(self):
        deadline = Deadline.never()

        assert deadline.remaining() is None
        assert deadline.expired() is False
        assert deadline.cancelled() is False
        assert deadline.bounded(10.0) == 10.0

    def test_zero_timeout_is_expired_immediately(self):
        deadline = Deadline(0)

        assert deadline.expired() is True
        assert deadline.cancelled() is True
        assert deadline.remaining() == 0.0

    def test_bounded_clamps_to_remaining_time(self):
        deadline = Deadline(1.0)

        assert deadline.bounded(10.0) <= 1.0
        assert deadline.bounded(0.5) == 0.5

    def test_expires_after_timeout(self):
        deadline = Deadline(0.01)
        time.sleep(0.02)

        assert deadline.expired() is True

    def test_cancel_without_expiry(self):
        deadline = Deadline(60)
        deadline.cancel()

        assert deadline.expired() is False
        assert deadline.cancelled() is True

    def test_negative_timeout_is_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            Deadline(-1)
