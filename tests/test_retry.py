"""Tests for retry helpers."""

import logging

import pytest

from langfy.utils.retry import call_with_retry, chunked, linear_delay


class TestLinearDelay:
    """Test cases for linear_delay."""

    def test_grows_linearly(self):
        assert [linear_delay(2, n) for n in (1, 2, 3)] == [2, 4, 6]

    def test_negative_base(self):
        assert linear_delay(-1, 3) == 0


class TestCallWithRetry:
    """Test cases for call_with_retry."""

    def test_first_attempt_succeeds(self):
        sleeps = []
        assert call_with_retry(lambda: 'ok', default=None, sleep=sleeps.append) == 'ok'
        assert sleeps == []

    def test_retries_then_succeeds(self):
        attempts = []

        def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise ValueError('not yet')
            return 'done'

        sleeps = []
        assert call_with_retry(flaky, default=None, max_attempts=3, retry_delay=1, sleep=sleeps.append) == 'done'
        assert sleeps == [1, 2]

    def test_returns_default_when_exhausted(self, caplog):
        def broken():
            raise ValueError('still broken')

        with caplog.at_level(logging.ERROR, logger='langfy'):
            result = call_with_retry(broken, default={}, max_attempts=2, sleep=lambda s: None, description='Lookup')

        assert result == {}
        assert 'Lookup failed after 2 attempts: still broken' in caplog.text

    def test_unlisted_errors_propagate(self):
        def broken():
            raise KeyError('nope')

        with pytest.raises(KeyError):
            call_with_retry(broken, default=None, retry_on=(ValueError,), sleep=lambda s: None)

    def test_at_least_one_attempt(self):
        calls = []
        call_with_retry(lambda: calls.append(1), default=None, max_attempts=0)
        assert calls == [1]


class TestChunked:
    """Test cases for chunked."""

    def test_splits(self):
        assert list(chunked([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]

    def test_empty(self):
        assert list(chunked([], 3)) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            list(chunked([1], 0))
