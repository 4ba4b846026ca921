"""Circuit breaker for the generation collaborator.

Tracks consecutive failures and stops calling a collaborator that is down,
so insight requests degrade to fallback immediately instead of waiting out
a timeout on every call.

- CLOSED: Normal operation, requests pass through
- OPEN: Too many failures detected, reject requests immediately
- HALF_OPEN: Testing if service recovered, allow limited test requests
"""

import logging
import threading
import time
from collections.abc import Callable
from enum import Enum
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"        # Normal operation
    OPEN = "open"            # Failures exceeded threshold, reject requests
    HALF_OPEN = "half_open"  # Testing if service recovered


class CircuitOpenError(RuntimeError):
    """Raised by CircuitBreaker.call when the circuit rejects a request."""

    def __init__(self, name: str):
        super().__init__(f"Circuit breaker for {name} is open")
        self.name = name


class CircuitBreaker:
    """
    Circuit breaker guarding one external collaborator.

    State Machine:
        CLOSED -> (failure_count >= threshold) -> OPEN
        OPEN -> (timeout elapsed) -> HALF_OPEN
        HALF_OPEN -> (success_count >= half_open_max_calls) -> CLOSED
        HALF_OPEN -> (any failure) -> OPEN
    """

    def __init__(
        self,
        threshold: int,
        timeout: float,
        half_open_max_calls: int = 1,
        name: str = "collaborator",
        clock: Callable[[], float] = time.monotonic
    ):
        """Initialize circuit breaker.

        Args:
            threshold: Number of failures required to open circuit
            timeout: Seconds to wait in OPEN state before trying HALF_OPEN
            half_open_max_calls: Test calls allowed (and successes required) in HALF_OPEN
            name: Label used in logs and errors
            clock: Monotonic time source, injectable for tests

        Raises:
            ValueError: If threshold <= 0, timeout < 0 or half_open_max_calls <= 0
        """
        if threshold <= 0:
            raise ValueError("threshold must be > 0")
        if timeout < 0:
            raise ValueError("timeout must be >= 0")
        if half_open_max_calls <= 0:
            raise ValueError("half_open_max_calls must be > 0")

        self.threshold = threshold
        self.timeout = timeout
        self.half_open_max_calls = half_open_max_calls
        self.name = name
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._opened_at: float | None = None
        self._half_open_calls = 0

        self._lock = threading.Lock()

    def _current_state(self) -> CircuitState:
        # Caller holds self._lock
        if self._state == CircuitState.OPEN and self._opened_at is not None:
            elapsed = self._clock() - self._opened_at
            if elapsed >= self.timeout:
                logger.info(f"Circuit {self.name} HALF_OPEN after {elapsed:.1f}s")
                self._state = CircuitState.HALF_OPEN
                self._half_open_calls = 0
                self._success_count = 0
        return self._state

    def can_attempt(self) -> bool:
        """Check whether a request may go out, counting HALF_OPEN test calls."""
        with self._lock:
            state = self._current_state()

            if state == CircuitState.OPEN:
                logger.warning(f"Circuit {self.name} OPEN - rejecting request")
                return False

            if state == CircuitState.HALF_OPEN:
                if self._half_open_calls >= self.half_open_max_calls:
                    logger.debug(f"Circuit {self.name} HALF_OPEN test calls exhausted")
                    return False
                self._half_open_calls += 1

            return True

    def record_success(self) -> None:
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._success_count += 1
                if self._success_count >= self.half_open_max_calls:
                    self._state = CircuitState.CLOSED
                    self._failure_count = 0
                    self._success_count = 0
                    self._half_open_calls = 0
                    logger.info(f"Circuit {self.name} CLOSED (recovered)")
            elif self._state == CircuitState.CLOSED:
                # Only consecutive failures count toward the threshold
                self._failure_count = 0

    def record_failure(self) -> None:
        with self._lock:
            self._failure_count += 1
            self._half_open_calls = 0

            if self._state == CircuitState.HALF_OPEN:
                self._open()
                logger.warning(f"Circuit {self.name} OPEN (failure during recovery test)")
            elif self._failure_count >= self.threshold:
                self._open()
                logger.warning(
                    f"Circuit {self.name} OPEN "
                    f"({self._failure_count} failures >= threshold {self.threshold})"
                )

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = self._clock()

    def call(self, func: Callable[..., T], *args, **kwargs) -> T:
        """Run func through the breaker.

        Raises:
            CircuitOpenError: If the circuit rejects the request
        """
        if not self.can_attempt():
            raise CircuitOpenError(self.name)
        try:
            result = func(*args, **kwargs)
        except Exception:
            self.record_failure()
            raise
        self.record_success()
        return result

    def get_state(self) -> CircuitState:
        with self._lock:
            return self._current_state()

    def get_stats(self) -> dict:
        """Breaker statistics for the health endpoint."""
        with self._lock:
            return {
                "name": self.name,
                "state": self._current_state().value,
                "failure_count": self._failure_count,
                "success_count": self._success_count,
            }
