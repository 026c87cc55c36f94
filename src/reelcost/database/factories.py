"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from reelcost.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks REELCOST_DB_PATH
            environment variable, then defaults to ~/.reelcost/reelcost.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("REELCOST_DB_PATH")

    if database_path is None:
        # Default to ~/.reelcost/reelcost.db
        home = Path.home()
        db_dir = home / ".reelcost"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "reelcost.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)


def create_database(
    database_path: Optional[str] = None, database_url: Optional[str] = None
) -> SQLAlchemyDatabase:
    """Create a database instance from a URL or a SQLite path.

    Args:
        database_path: Path to SQLite database file
        database_url: Full SQLAlchemy URL. If None, checks REELCOST_DATABASE_URL
            environment variable. A URL wins over a path.

    Returns:
        SQLAlchemyDatabase instance
    """
    if database_url is None:
        database_url = os.environ.get("REELCOST_DATABASE_URL")
    if database_url:
        return SQLAlchemyDatabase(database_url)
    return create_sqlite_database(database_path=database_path)
