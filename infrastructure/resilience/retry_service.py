"""
Fault tolerance for workspace backend calls: per-call timeouts, a circuit breaker
and bounded retries with exponential backoff.

Only BackendUnavailable is transient. ExpectedAbsence and BackendError mean the
backend answered, so they neither trip the breaker nor get retried.
"""

import asyncio
import random
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from infrastructure.external.errors import BackendError, BackendUnavailable, ExpectedAbsence
from infrastructure.monitoring.logging_service import get_logger

logger = get_logger(__name__)

AsyncCall = Callable[[], Awaitable[Any]]

RETRIABLE_ERRORS = (BackendUnavailable,)
NON_RETRIABLE_ERRORS = (ExpectedAbsence, BackendError)


def exponential_backoff_delay(attempt: int, base_delay: float = 0.5, max_delay: float = 10.0) -> float:
    """
    Delay before retry number `attempt` (0-indexed), capped at `max_delay`
    plus up to 10% jitter
    """
    delay = min(base_delay * 2 ** attempt, max_delay)
    return delay + random.uniform(0, delay / 10)


class CircuitBreakerState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerError(BackendUnavailable):
    """The breaker is open, the backend was not called"""
    pass


class CircuitBreaker:
    """
    Stops calling the backend after repeated unavailability.

    CLOSED lets every call through. `failure_threshold` consecutive failures
    switch to OPEN, which rejects calls until `recovery_timeout` seconds have
    passed since the last failure. The next call then runs in HALF_OPEN: success
    closes the breaker, failure opens it again.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: int = 60,
        expected_exception: tuple = RETRIABLE_ERRORS,
        name: str = "CircuitBreaker"
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception
        self.name = name

        self.state = CircuitBreakerState.CLOSED
        self.failure_count = 0
        self.success_count = 0
        self.last_failure_time: Optional[datetime] = None

    def _seconds_since_failure(self) -> float:
        if self.last_failure_time is None:
            return float("inf")
        return (datetime.now() - self.last_failure_time).total_seconds()

    def _remaining_timeout(self) -> float:
        if self.state is not CircuitBreakerState.OPEN:
            return 0
        return max(0, self.recovery_timeout - self._seconds_since_failure())

    def _allow_call(self) -> bool:
        if self.state is CircuitBreakerState.OPEN:
            if self._seconds_since_failure() < self.recovery_timeout:
                return False
            self.state = CircuitBreakerState.HALF_OPEN
            logger.info(f"Circuit '{self.name}' half-open, probing backend")
        return True

    def _on_success(self):
        self.failure_count = 0
        self.success_count += 1
        if self.state is CircuitBreakerState.HALF_OPEN:
            self.state = CircuitBreakerState.CLOSED
            logger.info(f"Circuit '{self.name}' closed, backend recovered")

    def _on_failure(self, error: Exception):
        self.failure_count += 1
        self.last_failure_time = datetime.now()

        reopen = self.state is CircuitBreakerState.HALF_OPEN
        trip = self.state is CircuitBreakerState.CLOSED and self.failure_count >= self.failure_threshold
        if reopen or trip:
            self.state = CircuitBreakerState.OPEN
            logger.warning(f"Circuit '{self.name}' open after {self.failure_count} failures (last: {error})")

    async def execute(self, func: AsyncCall) -> Any:
        """
        Await `func` unless the breaker is open

        Raises:
            CircuitBreakerError: The breaker is open
        """
        if not self._allow_call():
            raise CircuitBreakerError(
                f"Circuit breaker '{self.name}' is OPEN, backend unavailable. "
                f"Next attempt in {self._remaining_timeout():.0f}s."
            )

        try:
            result = await func()
        except self.expected_exception as e:
            self._on_failure(e)
            raise
        except NON_RETRIABLE_ERRORS:
            self._on_success()
            raise

        self._on_success()
        return result

    def get_state(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "state": self.state.value,
            "failure_count": self.failure_count,
            "success_count": self.success_count,
            "failure_threshold": self.failure_threshold,
            "remaining_timeout": self._remaining_timeout(),
            "last_failure_time": self.last_failure_time.isoformat() if self.last_failure_time else None
        }

    def reset(self):
        self.state = CircuitBreakerState.CLOSED
        self.failure_count = 0
        self.last_failure_time = None
        logger.info(f"Circuit '{self.name}' reset")


class RetryService:
    """
    Combines timeouts, circuit breakers and retries around backend calls.

    `sleep` is injectable so backoff can be tested without waiting.
    """

    BACKEND_BREAKER = "workspace_backend"

    def __init__(self, sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self.logger = get_logger(__name__)
        self._sleep = sleep
        self._circuit_breakers: Dict[str, CircuitBreaker] = {}

    def create_circuit_breaker(
        self,
        name: str,
        failure_threshold: int = 5,
        recovery_timeout: int = 60,
        expected_exception: tuple = RETRIABLE_ERRORS
    ) -> CircuitBreaker:
        breaker = CircuitBreaker(failure_threshold, recovery_timeout, expected_exception, name)
        self._circuit_breakers[name] = breaker
        self.logger.debug(f"Circuit '{name}' created (threshold={failure_threshold}, recovery={recovery_timeout}s)")
        return breaker

    def get_circuit_breaker(self, name: str) -> Optional[CircuitBreaker]:
        return self._circuit_breakers.get(name)

    def get_backend_circuit_breaker(self, failure_threshold: int = 5, recovery_timeout: int = 60) -> CircuitBreaker:
        """The shared breaker guarding the workspace backend, created on first use"""
        breaker = self.get_circuit_breaker(self.BACKEND_BREAKER)
        if breaker is None:
            breaker = self.create_circuit_breaker(self.BACKEND_BREAKER, failure_threshold, recovery_timeout)
        return breaker

    async def call_with_timeout(self, func: AsyncCall, timeout: Optional[float]) -> Any:
        """Await `func`, raising BackendUnavailable if it takes longer than `timeout` seconds"""
        try:
            return await asyncio.wait_for(func(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise BackendUnavailable(f"Backend call timed out after {timeout}s") from e

    async def retry_with_backoff(
        self,
        func: AsyncCall,
        max_retries: int = 0,
        base_delay: float = 0.5,
        max_delay: float = 10.0,
        on_retry: Optional[Callable[[int, Exception], None]] = None
    ) -> Any:
        """
        Await `func`, retrying transient failures up to `max_retries` times

        Args:
            func: Zero-argument coroutine function
            max_retries: Retries after the first attempt
            base_delay: First backoff delay in seconds
            max_delay: Backoff cap in seconds
            on_retry: Called with (retry_number, error) before each retry

        Raises:
            CircuitBreakerError: Immediately, an open breaker is never retried
            The last error once retries are exhausted, or any non-transient error
        """
        attempt = 0
        while True:
            try:
                result = await func()
            except CircuitBreakerError:
                raise
            except RETRIABLE_ERRORS as e:
                if attempt >= max_retries:
                    if max_retries:
                        self.logger.warning(f"Giving up after {max_retries} retries: {e}")
                    raise

                delay = exponential_backoff_delay(attempt, base_delay, max_delay)
                attempt += 1
                self.logger.info(f"Retry {attempt}/{max_retries} in {delay:.2f}s after {type(e).__name__}")
                if on_retry:
                    on_retry(attempt, e)
                await self._sleep(delay)
                continue

            if attempt:
                self.logger.info(f"Backend call succeeded on retry {attempt}")
            return result

    async def resilient_call(
        self,
        func: AsyncCall,
        timeout: Optional[float] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        max_retries: int = 0,
        on_retry: Optional[Callable[[int, Exception], None]] = None
    ) -> Any:
        """Await `func` with a per-attempt timeout, inside the breaker, with retries"""
        breaker = circuit_breaker or self.get_backend_circuit_breaker()

        async def attempt():
            return await breaker.execute(lambda: self.call_with_timeout(func, timeout))

        return await self.retry_with_backoff(attempt, max_retries=max_retries, on_retry=on_retry)
