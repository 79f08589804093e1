"""Abstract persistence interfaces.

Repositories exchange plain domain entities. ``Database`` groups them with
the unit-of-work controls: outside ``begin_transaction`` every write is
committed immediately, inside it writes are only flushed until ``commit``.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from cnabit.domain.entities import (
    File,
    FileStatus,
    Store,
    StoreBalance,
    Transaction,
    TransactionFilter,
    TransactionType,
)


class FileRepository(ABC):
    """Persistence of File aggregates."""

    @abstractmethod
    async def get_by_id(self, file_id: UUID) -> Optional[File]:
        """Get file by ID."""
        pass

    @abstractmethod
    async def add(self, file: File) -> None:
        """Insert a new file."""
        pass

    @abstractmethod
    async def update(self, file: File) -> None:
        """Persist the full current state of a file (status, timestamps, error)."""
        pass

    @abstractmethod
    async def list_files(self, status: Optional[FileStatus] = None) -> list[File]:
        """List files, newest upload first, optionally filtered by status."""
        pass

    @abstractmethod
    async def list_pending(self) -> list[File]:
        """List files in Uploaded or Processing state, oldest upload first."""
        pass


class StoreRepository(ABC):
    """Persistence of Store entities."""

    @abstractmethod
    async def get_by_id(self, store_id: UUID) -> Optional[Store]:
        """Get store by ID."""
        pass

    @abstractmethod
    async def get_by_name_and_owner(self, name: str, owner_name: str) -> Optional[Store]:
        """Get store by its business key."""
        pass

    @abstractmethod
    async def add(self, store: Store) -> None:
        """Insert a store.

        Raises:
            ConflictError: If a store with the same business key exists
        """
        pass

    @abstractmethod
    async def update(self, store: Store) -> None:
        """Persist the current state of an existing store."""
        pass

    @abstractmethod
    async def list_stores(self) -> list[Store]:
        """List all stores ordered by name."""
        pass

    @abstractmethod
    async def list_balances(self) -> list[StoreBalance]:
        """List stores with balances aggregated from their transactions.

        Balances are computed at query time from amounts and the
        transaction type signs; nothing is cached.
        """
        pass

    @abstractmethod
    async def get_balance(self, store_id: UUID) -> Optional[StoreBalance]:
        """Get the aggregated balance of one store, or None if it does not exist."""
        pass


class TransactionRepository(ABC):
    """Persistence of Transaction entities."""

    @abstractmethod
    async def get_by_file_id(self, file_id: UUID) -> list[Transaction]:
        """Get all transactions of a file in insertion order."""
        pass

    @abstractmethod
    async def count_by_file_id(self, file_id: UUID) -> int:
        """Count transactions referencing a file."""
        pass

    @abstractmethod
    async def get_by_store_id(self, store_id: UUID) -> list[Transaction]:
        """Get all transactions of a store in insertion order."""
        pass

    @abstractmethod
    async def add_range(self, transactions: list[Transaction]) -> None:
        """Insert transactions in the given order."""
        pass

    @abstractmethod
    async def list_transactions(self, filters: Optional[TransactionFilter] = None) -> list[Transaction]:
        """List transactions matching optional filters, ordered by ID."""
        pass


class TransactionTypeRepository(ABC):
    """Read access to the transaction type lookup."""

    @abstractmethod
    async def get_by_code(self, type_code: str) -> Optional[TransactionType]:
        """Get a transaction type by its one-digit code."""
        pass

    @abstractmethod
    async def list_types(self) -> list[TransactionType]:
        """List all transaction types ordered by code."""
        pass


class Database(ABC):
    """Abstract database interface for cnabit: repositories plus unit of work."""

    files: FileRepository
    stores: StoreRepository
    transactions: TransactionRepository
    transaction_types: TransactionTypeRepository

    @abstractmethod
    async def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    async def initialize_schema(self) -> None:
        """Initialize database schema (create tables, seed lookups)."""
        pass

    @abstractmethod
    async def begin_transaction(self) -> None:
        """Start an explicit unit of work."""
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Commit the current unit of work."""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Discard the current unit of work."""
        pass

    @property
    @abstractmethod
    def in_transaction(self) -> bool:
        """Whether an explicit unit of work is open."""
        pass
