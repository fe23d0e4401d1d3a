"""Application environment types.

Used by Settings and the container to pick environment-specific behavior:
- DEVELOPMENT: local runs, human-readable logs, development secrets allowed
- TESTING: automated test execution (JSON logs, in-memory databases)
- CI: continuous integration runs
- PRODUCTION: real secrets required, JSON logs
"""

from enum import Enum


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    CI = "ci"
    PRODUCTION = "production"
