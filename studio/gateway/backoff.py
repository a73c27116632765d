"""Backoff scheduler — deterministic exponential delays for the retry loop.

Formula: min(base_delay * backoff_factor^attempt, max_delay), attempt is 0-based.
No jitter.
"""

from __future__ import annotations

from studio.gateway.types import RetryPolicy


def delay_for(attempt: int, policy: RetryPolicy) -> float:
    """Delay in seconds to wait after the given (0-based) failed attempt."""
    if attempt < 0:
        raise ValueError(f"attempt must be >= 0, got {attempt}")

    try:
        exponential = policy.base_delay * (policy.backoff_factor**attempt)
    except OverflowError:
        return policy.max_delay
    return min(exponential, policy.max_delay)


def max_total_delay(policy: RetryPolicy) -> float:
    """Upper bound on time spent sleeping across a full retry loop."""
    return sum(delay_for(attempt, policy) for attempt in range(policy.max_retries))
