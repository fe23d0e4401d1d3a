"""CSRF validation failure reasons.

Reasons are logged and returned to middleware; clients only ever see a
generic 403.
"""

from enum import Enum


class CSRFFailureReason(str, Enum):
    """Why a state-changing request failed CSRF validation."""

    MISSING_SESSION = "missing_session"
    MISSING_TOKEN = "missing_token"
    INVALID_TOKEN = "invalid_token"
    ORIGIN_MISMATCH = "origin_mismatch"
