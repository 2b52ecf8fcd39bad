"""
Circuit Breaker configuration for external service calls.

This module provides a pre-configured Circuit Breaker for the hotel supplier
API to prevent cascading failures and resource exhaustion.

Circuit Breaker Pattern:
- CLOSED: Normal operation, requests pass through
- OPEN: Too many failures, requests fail immediately
- HALF_OPEN: Testing if service recovered, limited requests allowed

Configuration:
- fail_max: Number of consecutive failures before opening circuit
- reset_timeout: Seconds to wait before attempting recovery (HALF_OPEN)
"""

import logging
from typing import Any, Awaitable, Callable, TypeVar

from pybreaker import CircuitBreaker, CircuitBreakerError, CircuitBreakerListener

logger = logging.getLogger(__name__)

T = TypeVar("T")


def log_circuit_state_change(breaker_name: str, old_state: str, new_state: str) -> None:
    """
    Log circuit breaker state changes for monitoring and alerting.
    """
    logger.warning(
        "Circuit breaker state changed",
        extra={
            "breaker_name": breaker_name,
            "old_state": old_state,
            "new_state": new_state,
        },
    )


class StateChangeLogger(CircuitBreakerListener):
    """Listener for circuit breaker state changes."""

    def __init__(self, name: str):
        self.name = name

    def state_change(self, cb, old_state, new_state):
        log_circuit_state_change(
            self.name,
            old_state.name if old_state else "none",
            new_state.name if new_state else "none",
        )


def build_supplier_breaker(
    name: str = "hotel_supplier",
    fail_max: int = 5,
    reset_timeout: int = 60,
) -> CircuitBreaker:
    """
    Open the circuit after `fail_max` consecutive failures, retry after `reset_timeout` seconds.

    The call that trips the circuit re-raises its own error; only later calls
    see `CircuitBreakerError`.
    """
    return CircuitBreaker(
        fail_max=fail_max,
        reset_timeout=reset_timeout,
        name=f"{name}_circuit_breaker",
        listeners=[StateChangeLogger(name)],
        throw_new_error_on_trip=False,
    )


# Shared breaker for the hotel supplier API
supplier_breaker = build_supplier_breaker()


async def call_with_breaker(
    breaker: CircuitBreaker,
    func: Callable[..., Awaitable[T]],
    *args: Any,
    **kwargs: Any,
) -> T:
    """
    Await an async call under the breaker's accounting.

    pybreaker only wraps synchronous callables, so the coroutine is awaited
    inside `breaker.calling()`: entering checks the circuit (an elapsed open
    circuit moves to half-open and this call becomes the trial) and leaving
    records the outcome of the awaited call.

    Raises:
        CircuitBreakerError: if the circuit is open.
        Exception: whatever the wrapped call raised.
    """
    with breaker.calling():
        return await func(*args, **kwargs)


__all__ = [
    "supplier_breaker",
    "build_supplier_breaker",
    "call_with_breaker",
    "CircuitBreakerError",
]
