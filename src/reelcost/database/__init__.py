"""Database layer for reelcost application."""

from reelcost.database.base import Database
from reelcost.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
