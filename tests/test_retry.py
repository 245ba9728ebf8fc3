"""Tests for the fixed-delay retry helper."""

import pytest

from mtp_music_sync.core.errors import RetryExhaustedError, TransientError
from mtp_music_sync.core.retry import RetryOutcome, with_retry


class Flaky:
    """Callable that fails a given number of times before succeeding."""

    def __init__(self, failures, value="done", error=TransientError):
        self.failures = failures
        self.value = value
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error(f"failure {self.calls}")
        return self.value


@pytest.fixture
def sleeps():
    """Record requested sleeps instead of sleeping."""
    return []


class TestWithRetry:
    """Tests for with_retry."""

    def test_first_attempt_succeeds(self, sleeps):
        """Test that a working operation runs once."""
        operation = Flaky(0)
        result = with_retry(operation, sleep=sleeps.append)

        assert result.outcome == RetryOutcome.SUCCESS
        assert result.value == "done"
        assert result.attempts == 1
        assert operation.calls == 1
        assert sleeps == []

    def test_succeeds_after_failures(self, sleeps):
        """Test that transient failures are retried with the fixed delay."""
        operation = Flaky(2)
        result = with_retry(operation, attempts=3, delay=0.5, sleep=sleeps.append)

        assert result.ok
        assert result.attempts == 3
        assert sleeps == [0.5, 0.5]

    def test_delay_sequence_per_gap(self, sleeps):
        """Test that a delay sequence gives one value per gap."""
        operation = Flaky(5)
        result = with_retry(
            operation, attempts=3, delay=(0.0, 2.0), sleep=sleeps.append
        )

        assert result.outcome == RetryOutcome.EXHAUSTED
        assert operation.calls == 3
        # The zero delay of the first gap does not sleep at all
        assert sleeps == [2.0]

    def test_exhausted_unwrap_raises(self, sleeps):
        """Test that unwrap raises with the last error as cause."""
        result = with_retry(Flaky(10), attempts=2, sleep=sleeps.append)

        assert not result.ok
        assert isinstance(result.error, TransientError)
        with pytest.raises(RetryExhaustedError) as exc_info:
            result.unwrap("Could not do it", path="/MUSIC/A.MP3")

        assert exc_info.value.__cause__ is result.error
        assert exc_info.value.context["path"] == "/MUSIC/A.MP3"
        assert exc_info.value.context["attempts"] == 2
        assert "/MUSIC/A.MP3" in str(exc_info.value)

    def test_fallback_success_is_degraded(self, sleeps):
        """Test that a successful fallback yields a DEGRADED result."""
        result = with_retry(
            Flaky(10), attempts=3, fallback=lambda: "partial", sleep=sleeps.append
        )

        assert result.outcome == RetryOutcome.DEGRADED
        assert result.ok
        assert result.value == "partial"
        assert result.unwrap() == "partial"
        assert isinstance(result.error, TransientError)

    def test_fallback_failure_is_exhausted(self, sleeps):
        """Test that a failing fallback keeps both errors."""
        fallback = Flaky(1, error=TransientError)
        result = with_retry(
            Flaky(10), attempts=2, fallback=fallback, sleep=sleeps.append
        )

        assert result.outcome == RetryOutcome.EXHAUSTED
        assert fallback.calls == 1
        assert isinstance(result.fallback_error, TransientError)

    def test_fallback_not_used_on_success(self, sleeps):
        """Test that the fallback only runs after all attempts failed."""
        fallback = Flaky(0)
        result = with_retry(Flaky(1), fallback=fallback, sleep=sleeps.append)

        assert result.outcome == RetryOutcome.SUCCESS
        assert fallback.calls == 0

    def test_other_errors_propagate(self, sleeps):
        """Test that errors outside retry_on are not retried."""
        operation = Flaky(1, error=ValueError)

        with pytest.raises(ValueError):
            with_retry(operation, attempts=3, sleep=sleeps.append)

        assert operation.calls == 1

    def test_custom_retry_on(self, sleeps):
        """Test retrying a caller-chosen exception type."""
        operation = Flaky(1, error=KeyError)
        result = with_retry(operation, retry_on=(KeyError,), sleep=sleeps.append)

        assert result.outcome == RetryOutcome.SUCCESS
        assert result.attempts == 2
