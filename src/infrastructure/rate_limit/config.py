"""Rate limit policies and endpoint-to-action mapping.

Two-Tier Configuration:
    Tier 1 - Action assignment (``action_for_request``):
        Each mutating endpoint belongs to one RateLimitAction.
        Example: POST /api/v1/sessions → LOGIN

    Tier 2 - Policy per action (``build_policies``):
        Each action has concrete limits read from Settings.
        Example: LOGIN → 5 attempts per 15 minutes, then a 30 minute block

    Tier 3 - Repeat offenders (``build_escalation``):
        Three blocks within a day block the client on every endpoint.
        Example: third LOGIN block → 8 x 30 minutes everywhere

Usage:
    from src.infrastructure.rate_limit.config import action_for_request

    action = action_for_request("POST", "/api/v1/payments")
    # RateLimitAction.PAYMENT
"""

from src.core.config import Settings
from src.core.constants import MUTATING_HTTP_METHODS, SKIPPED_PATH_PREFIXES
from src.domain.enums import RateLimitAction
from src.domain.value_objects.rate_limit_policy import EscalationPolicy, RateLimitPolicy

API_V1_PREFIX = "/api/v1"

# Exact "{METHOD} {PATH}" assignments; checked before the prefix rules.
ENDPOINT_ACTIONS: dict[str, RateLimitAction] = {
    f"POST {API_V1_PREFIX}/sessions": RateLimitAction.LOGIN,
    f"POST {API_V1_PREFIX}/users": RateLimitAction.REGISTER,
    f"POST {API_V1_PREFIX}/password-resets": RateLimitAction.PASSWORD_RESET,
    f"POST {API_V1_PREFIX}/payments": RateLimitAction.PAYMENT,
}

ADMIN_PATH_PREFIX = f"{API_V1_PREFIX}/admin/"


def build_policies(settings: Settings) -> dict[RateLimitAction, RateLimitPolicy]:
    """Build one policy per action from settings.

    Only the admin policy carries the whitelist (loopback by default) so
    operators on the host are never locked out of unlock operations.

    Args:
        settings: Application settings.

    Returns:
        Mapping covering every RateLimitAction.

    Raises:
        ValueError: If a configured number is not positive.
    """
    whitelist = frozenset(settings.rate_limit_whitelist)
    policies: dict[RateLimitAction, RateLimitPolicy] = {}
    for action in RateLimitAction:
        prefix = f"rate_limit_{action.value}"
        policies[action] = RateLimitPolicy(
            max_attempts=getattr(settings, f"{prefix}_max_attempts"),
            window_seconds=getattr(settings, f"{prefix}_window_seconds"),
            block_duration_seconds=getattr(settings, f"{prefix}_block_seconds"),
            whitelist=whitelist if action is RateLimitAction.ADMIN else frozenset(),
        )
    return policies


def build_escalation(settings: Settings) -> EscalationPolicy:
    """Repeat offender rules from settings.

    Raises:
        ValueError: If a configured number is not positive.
    """
    return EscalationPolicy(
        threshold=settings.rate_limit_escalation_threshold,
        multiplier=settings.rate_limit_escalation_multiplier,
        window_seconds=settings.rate_limit_escalation_window_seconds,
    )


def is_skipped_path(path: str) -> bool:
    """Health, docs and OpenAPI paths are never rate limited."""
    return path == "/" or any(path.startswith(p) for p in SKIPPED_PATH_PREFIXES)


def action_for_request(method: str, path: str) -> RateLimitAction | None:
    """Map a request to the action whose budget it spends.

    Args:
        method: HTTP method.
        path: Request path.

    Returns:
        The action, or None when the request is not rate limited (safe
        method, skipped path, or outside the versioned API).

    Example:
        >>> action_for_request("DELETE", "/api/v1/admin/lockouts/alice@example.com")
        <RateLimitAction.ADMIN: 'admin'>
        >>> action_for_request("GET", "/api/v1/csrf-tokens") is None
        True
    """
    method = method.upper()
    if is_skipped_path(path):
        return None

    normalized = path.rstrip("/") or "/"
    if path.startswith(ADMIN_PATH_PREFIX):
        return RateLimitAction.ADMIN
    if method not in MUTATING_HTTP_METHODS:
        return None

    action = ENDPOINT_ACTIONS.get(f"{method} {normalized}")
    if action is not None:
        return action
    if normalized.startswith(API_V1_PREFIX):
        return RateLimitAction.API
    return None
