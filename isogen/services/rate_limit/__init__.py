from isogen.services.rate_limit.limiter import (
    CounterEntry,
    CounterStore,
    MemoryCounterStore,
    RateLimitDecision,
    RequestRateLimiter,
)

__all__ = [
    "CounterEntry",
    "CounterStore",
    "MemoryCounterStore",
    "RateLimitDecision",
    "RequestRateLimiter",
]
