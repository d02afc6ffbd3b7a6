"""Database utilities for Padi.

This module contains:
- Connection pool management
- Alembic migrations for the profiles and messages tables
"""

from padi.db.pool import PostgresPool

__all__ = ["PostgresPool"]
