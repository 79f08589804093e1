"""Database layer for cnabit."""

from cnabit.database.base import (
    Database,
    FileRepository,
    StoreRepository,
    TransactionRepository,
    TransactionTypeRepository,
)
from cnabit.database.factories import create_sqlite_database
from cnabit.database.sqlalchemy_db import SQLAlchemyDatabase

__all__ = [
    "Database",
    "FileRepository",
    "StoreRepository",
    "TransactionRepository",
    "TransactionTypeRepository",
    "SQLAlchemyDatabase",
    "create_sqlite_database",
]
