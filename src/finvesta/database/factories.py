"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from finvesta.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV_VAR = "FINVESTA_DB_PATH"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks FINVESTA_DB_PATH
            environment variable, then defaults to ~/.finvesta/finvesta.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get(DB_PATH_ENV_VAR)

    if database_path is None:
        db_dir = Path.home() / ".finvesta"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "finvesta.db")

    return SQLAlchemyDatabase(f"sqlite:///{database_path}")
