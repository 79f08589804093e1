"""Read-side services for files and transactions."""

from datetime import date
from typing import Optional
from uuid import UUID

from cnabit.database.base import Database
from cnabit.domain.entities import File, FileStatus, Transaction, TransactionFilter, TransactionType
from cnabit.domain.errors import NotFoundError, ValidationError, file_not_found


class FileQueryService:
    """Service for looking up uploaded files."""

    def __init__(self, db: Database):
        self.db = db

    async def get_file(self, file_id: UUID) -> File:
        """Get a file by ID.

        Raises:
            NotFoundError: If the file does not exist
        """
        file = await self.db.files.get_by_id(file_id)
        if file is None:
            raise NotFoundError(file_not_found(file_id))
        return file

    async def list_files(self, status: Optional[FileStatus] = None) -> list[File]:
        """List files, newest first, optionally only those in one status."""
        return await self.db.files.list_files(status)


class TransactionQueryService:
    """Service for listing transactions."""

    def __init__(self, db: Database):
        self.db = db

    async def list_transactions(
        self,
        store_id: Optional[UUID] = None,
        file_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        type_code: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters.

        Args:
            store_id: Only transactions of this store
            file_id: Only transactions imported from this file
            start_date: Earliest transaction date (inclusive)
            end_date: Latest transaction date (inclusive)
            type_code: Only this transaction type
            limit: Maximum number of rows

        Returns:
            Transactions ordered by ID

        Raises:
            ValidationError: If start_date is after end_date
        """
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError("Start date must be on or before end date")

        filters = TransactionFilter(
            store_id=store_id,
            file_id=file_id,
            start_date=start_date,
            end_date=end_date,
            type_code=type_code,
            limit=limit,
        )
        return await self.db.transactions.list_transactions(filters)

    async def list_transaction_types(self) -> list[TransactionType]:
        """List the transaction type lookup."""
        return await self.db.transaction_types.list_types()
