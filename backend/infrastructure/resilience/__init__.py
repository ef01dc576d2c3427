"""
Resilience for upstream weather calls.

Provides:
- Circuit breaker with a rolling failure-ratio window
- Retry with exponential backoff and jitter
- Per-attempt timeout
- A provider wrapper composing all three
"""

from .circuit_breaker import CircuitBreaker, CircuitState
from .policy import ResiliencePolicy
from .resilient_provider import ResilientWeatherProvider
from .retry import RetryConfig, RetryPolicy

__all__ = [
    "CircuitBreaker",
    "CircuitState",
    "ResiliencePolicy",
    "ResilientWeatherProvider",
    "RetryConfig",
    "RetryPolicy",
]
