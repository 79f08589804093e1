"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from cnabit.database.sqlalchemy_db import SQLAlchemyDatabase

DEFAULT_DB_PATH = Path.home() / ".cnabit" / "cnabit.db"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance on the aiosqlite driver.

    The resolution order is the argument, then CNABIT_DB_PATH, then
    ~/.cnabit/cnabit.db. The parent directory is created when missing.

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    path = Path(database_path or os.environ.get("CNABIT_DB_PATH") or DEFAULT_DB_PATH).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return SQLAlchemyDatabase(f"sqlite+aiosqlite:///{path}")
