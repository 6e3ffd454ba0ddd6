"""
Tests for timeouts, retry logic and the circuit breaker
"""

import asyncio
from datetime import datetime, timedelta

import pytest

from infrastructure.external.errors import BackendError, BackendUnavailable, ExpectedAbsence
from infrastructure.resilience import (
    CircuitBreaker,
    CircuitBreakerError,
    CircuitBreakerState,
    NON_RETRIABLE_ERRORS,
    RETRIABLE_ERRORS,
    RetryService,
    exponential_backoff_delay
)


class CallCounter:
    """Async callable failing a fixed number of times before succeeding"""

    def __init__(self, failures=0, error=None, result="ok"):
        self.failures = failures
        self.error = error or BackendUnavailable("down")
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.result


class TestErrorClassification:

    def test_unavailable_is_retriable(self):
        assert BackendUnavailable in RETRIABLE_ERRORS
        assert issubclass(CircuitBreakerError, BackendUnavailable)

    def test_answered_errors_are_not_retriable(self):
        assert ExpectedAbsence in NON_RETRIABLE_ERRORS
        assert BackendError in NON_RETRIABLE_ERRORS


class TestExponentialBackoff:

    def test_delay_grows_and_caps(self):
        assert 0.5 <= exponential_backoff_delay(0) <= 0.55
        assert 1.0 <= exponential_backoff_delay(1) <= 1.1
        assert 10.0 <= exponential_backoff_delay(10) <= 11.0


class TestCircuitBreaker:
    """Test circuit breaker state transitions"""

    def setup_method(self):
        self.breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=30, name="test")

    @pytest.mark.asyncio
    async def test_opens_after_threshold(self):
        call = CallCounter(failures=10)

        for _ in range(2):
            with pytest.raises(BackendUnavailable):
                await self.breaker.execute(call)

        assert self.breaker.state is CircuitBreakerState.OPEN

        with pytest.raises(CircuitBreakerError):
            await self.breaker.execute(call)
        assert call.calls == 2

    @pytest.mark.asyncio
    async def test_non_retriable_errors_keep_circuit_closed(self):
        call = CallCounter(failures=10, error=ExpectedAbsence("missing"))

        for _ in range(5):
            with pytest.raises(ExpectedAbsence):
                await self.breaker.execute(call)

        assert self.breaker.state is CircuitBreakerState.CLOSED
        assert self.breaker.failure_count == 0

    @pytest.mark.asyncio
    async def test_half_open_recovers_on_success(self):
        failing = CallCounter(failures=10)
        for _ in range(2):
            with pytest.raises(BackendUnavailable):
                await self.breaker.execute(failing)

        self.breaker.last_failure_time = datetime.now() - timedelta(seconds=31)

        result = await self.breaker.execute(CallCounter())

        assert result == "ok"
        assert self.breaker.state is CircuitBreakerState.CLOSED

    @pytest.mark.asyncio
    async def test_half_open_reopens_on_failure(self):
        failing = CallCounter(failures=10)
        for _ in range(2):
            with pytest.raises(BackendUnavailable):
                await self.breaker.execute(failing)

        self.breaker.last_failure_time = datetime.now() - timedelta(seconds=31)

        with pytest.raises(BackendUnavailable):
            await self.breaker.execute(failing)
        assert self.breaker.state is CircuitBreakerState.OPEN

    def test_get_state_and_reset(self):
        self.breaker.state = CircuitBreakerState.OPEN
        self.breaker.failure_count = 2
        self.breaker.last_failure_time = datetime.now()

        state = self.breaker.get_state()
        assert state["state"] == "open"
        assert 0 < state["remaining_timeout"] <= 30

        self.breaker.reset()
        assert self.breaker.get_state()["state"] == "closed"
        assert self.breaker.get_state()["remaining_timeout"] == 0


class TestRetryService:
    """Test retry and timeout behaviour"""

    def setup_method(self):
        self.delays = []

        async def fake_sleep(delay):
            self.delays.append(delay)

        self.service = RetryService(sleep=fake_sleep)

    @pytest.mark.asyncio
    async def test_retries_until_success(self):
        call = CallCounter(failures=2)
        retries = []

        result = await self.service.retry_with_backoff(
            call, max_retries=3, on_retry=lambda attempt, error: retries.append(attempt)
        )

        assert result == "ok"
        assert call.calls == 3
        assert retries == [1, 2]
        assert len(self.delays) == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        call = CallCounter(failures=10)

        with pytest.raises(BackendUnavailable):
            await self.service.retry_with_backoff(call, max_retries=2)

        assert call.calls == 3

    @pytest.mark.asyncio
    async def test_does_not_retry_non_retriable(self):
        call = CallCounter(failures=10, error=BackendError("bad request", status_code=400))

        with pytest.raises(BackendError):
            await self.service.retry_with_backoff(call, max_retries=3)

        assert call.calls == 1
        assert self.delays == []

    @pytest.mark.asyncio
    async def test_does_not_retry_open_circuit(self):
        call = CallCounter(failures=10, error=CircuitBreakerError("open"))

        with pytest.raises(CircuitBreakerError):
            await self.service.retry_with_backoff(call, max_retries=3)

        assert call.calls == 1

    @pytest.mark.asyncio
    async def test_timeout_becomes_unavailable(self):
        async def slow():
            await asyncio.sleep(1)

        with pytest.raises(BackendUnavailable, match="timed out"):
            await self.service.call_with_timeout(slow, timeout=0.01)

    @pytest.mark.asyncio
    async def test_resilient_call_uses_backend_breaker(self):
        result = await self.service.resilient_call(CallCounter(), timeout=1.0)

        breaker = self.service.get_circuit_breaker("workspace_backend")
        assert result == "ok"
        assert breaker is self.service.get_backend_circuit_breaker()
        assert breaker.success_count == 1
