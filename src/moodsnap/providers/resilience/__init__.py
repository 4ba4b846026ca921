"""Shared resilience utilities for providers.

Provides a circuit breaker and retry helpers for consistent failure
handling around the generation collaborator and local storage.
"""

from .circuit_breaker import CircuitBreaker, CircuitOpenError, CircuitState
from .decorators import retry_call, with_retry

__all__ = [
    "CircuitBreaker",
    "CircuitOpenError",
    "CircuitState",
    "retry_call",
    "with_retry",
]
