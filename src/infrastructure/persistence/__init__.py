"""Durable store for lockouts, idempotency records, sessions and events.

Exports the declarative base and the async engine wrapper. Models and
repositories live in the ``models`` and ``repositories`` packages.
"""

from src.infrastructure.persistence.base import BaseModel
from src.infrastructure.persistence.database import Database

__all__ = [
    "BaseModel",
    "Database",
]
