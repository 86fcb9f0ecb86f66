"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Write-locked transactions for streak and redemption updates
"""

from preptrack.db.database import get_db, init_db, transaction

__all__ = ["get_db", "init_db", "transaction"]
