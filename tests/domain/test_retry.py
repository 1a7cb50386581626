"""Tests for retry domain models."""

import pytest

from strata.domain.retry import RetryConfig, RetryPolicy


class TestRetryPolicy:
    """Test retry policy for status code categorisation."""

    @pytest.mark.parametrize("status_code", [408, 429, 500, 502, 503, 504])
    def test_should_retry_transient_status_codes(self, status_code):
        """Transient status codes should retry."""
        assert RetryPolicy().should_retry_status(status_code) is True

    @pytest.mark.parametrize("status_code", [400, 403, 404, 412, 416])
    def test_should_not_retry_permanent_status_codes(self, status_code):
        """Permanent status codes, including failed preconditions, never retry."""
        assert RetryPolicy().should_retry_status(status_code) is False

    def test_unknown_status_respects_policy(self):
        """Unknown status codes respect retry_unknown_errors setting."""
        assert RetryPolicy().should_retry_status(599) is False
        assert RetryPolicy(retry_unknown_errors=True).should_retry_status(599) is True

    def test_permanent_takes_precedence(self):
        """Permanent codes take precedence over transient."""
        policy = RetryPolicy(
            transient_status_codes=frozenset({500}),
            permanent_status_codes=frozenset({500}),
        )
        assert policy.should_retry_status(500) is False

    @pytest.mark.parametrize("method", ["GET", "get", "HEAD", "OPTIONS"])
    def test_idempotent_methods_allowed(self, method):
        """Only idempotent methods may be resent."""
        assert RetryPolicy().allows_method(method) is True

    @pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE"])
    def test_other_methods_not_allowed(self, method):
        """Methods outside the retryable set are never resent."""
        assert RetryPolicy().allows_method(method) is False


class TestRetryConfig:
    """Test retry configuration and backoff calculation."""

    def test_calculate_delay_exponential(self):
        """Delay grows exponentially without jitter."""
        config = RetryConfig(base_delay=1.0, exponential_base=2.0, jitter=False)
        assert [config.calculate_delay(n) for n in range(4)] == [1.0, 2.0, 4.0, 8.0]

    def test_calculate_delay_respects_max(self):
        """Delay is capped at max_delay."""
        config = RetryConfig(base_delay=1.0, max_delay=5.0, jitter=False)
        assert config.calculate_delay(10) == 5.0

    def test_calculate_delay_with_jitter(self):
        """Jitter stays within 25% of the base delay."""
        config = RetryConfig(base_delay=10.0, jitter=True)
        delays = [config.calculate_delay(0) for _ in range(100)]

        assert len(set(delays)) > 1
        assert all(7.5 <= d <= 12.5 for d in delays)

    def test_custom_policy(self):
        """Can provide custom retry policy."""
        custom_policy = RetryPolicy(transient_status_codes=frozenset({418}))
        config = RetryConfig(policy=custom_policy)
        assert config.policy is custom_policy
