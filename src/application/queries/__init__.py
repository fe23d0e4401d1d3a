"""Queries - Read operations that fetch data.

Queries NEVER change state.
"""

from src.application.queries.lockout_queries import GetLockoutStatus

__all__ = ["GetLockoutStatus"]
