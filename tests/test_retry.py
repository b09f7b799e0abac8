"""
Tests for Retry Handling
========================
"""

import sys
from pathlib import Path

import pytest

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jakmyeong import retry as retry_module
from jakmyeong.retry import RateLimitError, RetryHandler, parse_retry_after


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    """Record delays instead of sleeping."""
    delays = []
    monkeypatch.setattr(retry_module.time, 'sleep', delays.append)
    return delays


class Flaky:
    def __init__(self, failures, exc=RateLimitError):
        self.failures = failures
        self.exc = exc
        self.calls = 0

    def __call__(self, value):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc("busy")
        return value


class TestRetryHandler:
    """Tests for RetryHandler.execute()."""

    def test_defaults_from_app_yaml(self):
        handler = RetryHandler()
        assert handler.max_retries == 2
        assert handler.base_delay == 2.0

    def test_missing_section(self):
        with pytest.raises(ValueError, match='must be set in app.yaml'):
            RetryHandler(section='nothing.here')

    def test_succeeds_after_retries(self, no_sleep):
        func = Flaky(2)
        handler = RetryHandler(max_retries=2, base_delay=1.0, max_delay=10.0, exponential_base=2)
        assert handler.execute(func, args=('ok',), retryable_exceptions=(RateLimitError,)) == 'ok'
        assert func.calls == 3
        assert no_sleep == [1.0, 2.0]

    def test_gives_up(self, no_sleep):
        func = Flaky(5)
        handler = RetryHandler(max_retries=2, base_delay=1.0, max_delay=10.0, exponential_base=2)
        with pytest.raises(RateLimitError):
            handler.execute(func, args=('ok',), retryable_exceptions=(RateLimitError,))
        assert func.calls == 3

    def test_other_errors_are_not_retried(self, no_sleep):
        func = Flaky(1, exc=KeyError)
        handler = RetryHandler(max_retries=2, base_delay=1.0, max_delay=10.0, exponential_base=2)
        with pytest.raises(KeyError):
            handler.execute(func, args=('ok',), retryable_exceptions=(RateLimitError,))
        assert func.calls == 1
        assert no_sleep == []

    def test_delay_is_capped(self):
        handler = RetryHandler(max_retries=5, base_delay=2.0, max_delay=8.0, exponential_base=2)
        assert [handler.delay_for(i) for i in range(4)] == [2.0, 4.0, 8.0, 8.0]

    def test_retry_after_replaces_backoff(self, no_sleep):
        calls = []

        def limited():
            calls.append(1)
            if len(calls) == 1:
                raise RateLimitError("busy", retry_after=3)
            return 'ok'

        handler = RetryHandler(max_retries=2, base_delay=1.0, max_delay=10.0, exponential_base=2)
        assert handler.execute(limited) == 'ok'
        assert no_sleep == [3.0]

    def test_retry_after_is_capped(self):
        handler = RetryHandler(max_retries=2, base_delay=1.0, max_delay=10.0, exponential_base=2)
        assert handler.delay_for(0, RateLimitError("busy", retry_after=120)) == 10.0
        assert handler.delay_for(1, RateLimitError("busy")) == 2.0


class TestParseRetryAfter:
    """Tests for reading the Retry-After header."""

    def test_seconds(self):
        assert parse_retry_after('5') == 5.0
        assert parse_retry_after(' 1.5 ') == 1.5

    def test_unusable_values(self):
        assert parse_retry_after(None) is None
        assert parse_retry_after('') is None
        assert parse_retry_after('Wed, 21 Oct 2026 07:28:00 GMT') is None
        assert parse_retry_after('-1') is None
