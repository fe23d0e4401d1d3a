"""Rate limit infrastructure adapters.

Exports:
    InMemoryRateLimiter: Process-local limiter (default backend).
    RedisRateLimiter: Shared limiter over an atomic Lua script.
    build_policies: Per-action policies from Settings.
    build_escalation: Repeat offender rules from Settings.
    action_for_request: Endpoint → RateLimitAction mapping.
"""

from src.infrastructure.rate_limit.config import (
    action_for_request,
    build_escalation,
    build_policies,
)
from src.infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
from src.infrastructure.rate_limit.redis_rate_limiter import RedisRateLimiter

__all__ = [
    "InMemoryRateLimiter",
    "RedisRateLimiter",
    "action_for_request",
    "build_escalation",
    "build_policies",
]
