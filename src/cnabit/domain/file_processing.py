"""CNAB file processing domain service.

Turns an uploaded file into committed stores and transactions. The outcome of
a run is either a ``ProcessingResult`` (success or a permanent failure that
left the file Rejected) or a raised exception for infrastructure failures that
a caller may retry. Re-running a file is always safe: terminal files are
answered from their stored state and a file that already owns transactions is
never written again.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, UTC
from enum import Enum
from typing import Optional
from uuid import UUID

from cnabit.database.base import Database
from cnabit.domain import cnab_parser
from cnabit.domain.cnab_validator import validate_records
from cnabit.domain.entities import CNABRecord, File, FileStatus, Store, Transaction
from cnabit.domain.errors import ConflictError, file_not_found, previously_rejected
from cnabit.storage.base import FileStorage

logger = logging.getLogger(__name__)

MAX_ERROR_MESSAGE_LENGTH = 1000
MAX_REPORTED_ERRORS = 5
STORE_CONFLICT_RETRIES = 3


class FailureReason(str, Enum):
    """Permanent reasons a file was not processed."""

    NOT_FOUND = "not_found"
    PARSE_ERROR = "parse_error"
    VALIDATION_ERROR = "validation_error"
    PREVIOUSLY_REJECTED = "previously_rejected"


@dataclass(frozen=True)
class ProcessingResult:
    """Outcome of processing one file."""

    file_id: UUID
    success: bool
    status: Optional[FileStatus] = None
    failure: Optional[FailureReason] = None
    error_message: Optional[str] = None
    errors: tuple[str, ...] = ()
    stores_upserted: int = 0
    transactions_inserted: int = 0
    already_processed: bool = False


def truncate_error_message(message: str) -> str:
    """Cap an error message at the length the files table stores."""
    if len(message) <= MAX_ERROR_MESSAGE_LENGTH:
        return message
    return message[: MAX_ERROR_MESSAGE_LENGTH - 3] + "..."


def _summarize(prefix: str, errors: list[str] | tuple[str, ...]) -> str:
    return truncate_error_message(prefix + "; ".join(errors[:MAX_REPORTED_ERRORS]))


class FileProcessingService:
    """Service for processing uploaded CNAB files."""

    def __init__(self, db: Database, storage: FileStorage, today: Optional[date] = None):
        """Initialize file processing service.

        Args:
            db: Database instance
            storage: Storage holding the raw file content
            today: Reference date for transaction date checks (defaults to today)
        """
        self.db = db
        self.storage = storage
        self.today = today

    async def process_file(
        self, file_id: UUID, storage_key: Optional[str] = None, record_failure: bool = True
    ) -> ProcessingResult:
        """Process an uploaded file.

        Args:
            file_id: ID of the file to process
            storage_key: Storage key to read instead of the one recorded on the file
            record_failure: Mark the file Rejected when an unexpected error escapes.
                A caller that retries passes False and calls reject_after_failure
                once it gives up, so the file stays in Processing between attempts.

        Returns:
            ProcessingResult describing success or a permanent failure

        Raises:
            StorageError: If the content could not be read
            sqlalchemy.exc.SQLAlchemyError: If the database failed
            asyncio.CancelledError: If cancelled; the file stays in Processing
        """
        started = time.perf_counter()
        logger.info("File %s: processing started", file_id)

        file = await self.db.files.get_by_id(file_id)
        if file is None:
            logger.error("File %s: not found", file_id)
            return ProcessingResult(
                file_id=file_id,
                success=False,
                failure=FailureReason.NOT_FOUND,
                error_message=file_not_found(file_id),
            )

        if file.is_terminal:
            logger.info("File %s: already in terminal state %s, skipping", file_id, file.status.value)
            return await self._terminal_result(file)

        try:
            result = await self._run(file, storage_key)
        except asyncio.CancelledError:
            logger.warning("File %s: processing cancelled, left in %s", file_id, FileStatus.PROCESSING.value)
            await self._safe_rollback(file_id)
            raise
        except Exception as exc:
            logger.exception("File %s: processing failed", file_id)
            if record_failure:
                await self.reject_after_failure(file_id, exc)
            else:
                await self._safe_rollback(file_id)
            raise
        finally:
            logger.info(
                "Metrics: file_id=%s duration_ms=%d",
                file_id,
                (time.perf_counter() - started) * 1000,
            )
        return result

    async def _run(self, file: File, storage_key: Optional[str]) -> ProcessingResult:
        if file.status == FileStatus.UPLOADED:
            file.start_processing()
            await self.db.files.update(file)
            logger.info("File %s: status %s -> %s", file.id, FileStatus.UPLOADED.value, file.status.value)
        else:
            logger.info("File %s: resuming processing", file.id)

        key = storage_key or file.storage_key
        logger.info("File %s: reading content from %s", file.id, key)
        content = await self.storage.read(key)

        parsed = cnab_parser.parse_content(content, today=self.today)
        logger.info(
            "File %s: parsed %d lines, %d valid, %d errors",
            file.id,
            parsed.line_count,
            parsed.valid_line_count,
            len(parsed.errors),
        )
        if not parsed.is_valid:
            errors = parsed.errors or (cnab_parser.EMPTY_FILE_ERROR,)
            return await self._reject(
                file, _summarize("File validation failed: ", errors), FailureReason.PARSE_ERROR, errors
            )

        record_errors = validate_records(parsed.records, today=self.today)
        if record_errors:
            return await self._reject(
                file,
                _summarize("Record validation failed: ", record_errors),
                FailureReason.VALIDATION_ERROR,
                tuple(record_errors),
            )
        logger.info("File %s: all %d records validated", file.id, len(parsed.records))

        return await self._persist(file, list(parsed.records))

    async def _persist(self, file: File, records: list[CNABRecord]) -> ProcessingResult:
        """Write stores, transactions and the Processed status as one unit of work.

        A ConflictError from a concurrent insert of the same store is retried
        from a clean session, since the competing insert is now visible.
        """
        attempt = 1
        while True:
            existing = await self.db.transactions.count_by_file_id(file.id)
            if existing:
                # Nothing is written, so the file keeps its non-terminal status.
                logger.warning(
                    "File %s: %d transactions already stored while status is %s, skipping (idempotent)",
                    file.id,
                    existing,
                    file.status.value,
                )
                return ProcessingResult(
                    file_id=file.id,
                    success=True,
                    status=file.status,
                    transactions_inserted=existing,
                    already_processed=True,
                )

            await self.db.begin_transaction()
            try:
                store_ids = await self._upsert_stores(records)
                transactions = [self._build_transaction(file.id, record, store_ids) for record in records]
                await self.db.transactions.add_range(transactions)
                file.mark_as_processed()
                await self.db.files.update(file)
                await self.db.commit()
            except ConflictError as exc:
                await self._safe_rollback(file.id)
                if attempt == STORE_CONFLICT_RETRIES:
                    raise
                logger.warning("File %s: %s, retrying (attempt %d)", file.id, exc, attempt + 1)
                reloaded = await self.db.files.get_by_id(file.id)
                if reloaded is None:
                    raise
                if reloaded.is_terminal:
                    return await self._terminal_result(reloaded)
                file = reloaded
                attempt += 1
                continue
            except BaseException:
                await self._safe_rollback(file.id)
                raise

            logger.info(
                "File %s: committed %d stores and %d transactions, status %s",
                file.id,
                len(store_ids),
                len(transactions),
                file.status.value,
            )
            return ProcessingResult(
                file_id=file.id,
                success=True,
                status=file.status,
                stores_upserted=len(store_ids),
                transactions_inserted=len(transactions),
            )

    async def _upsert_stores(self, records: list[CNABRecord]) -> dict[tuple[str, str], UUID]:
        """Look up or create each distinct store once, in first-seen order."""
        store_ids: dict[tuple[str, str], UUID] = {}
        now = datetime.now(UTC)
        for record in records:
            key = record.store_key
            if key in store_ids:
                continue
            name, owner_name = key
            store = await self.db.stores.get_by_name_and_owner(name, owner_name)
            if store is None:
                store = Store(id=uuid.uuid4(), name=name, owner_name=owner_name, created_at=now, updated_at=now)
                await self.db.stores.add(store)
            else:
                await self.db.stores.update(replace(store, updated_at=now))
            store_ids[key] = store.id
        return store_ids

    @staticmethod
    def _build_transaction(file_id: UUID, record: CNABRecord, store_ids: dict[tuple[str, str], UUID]) -> Transaction:
        return Transaction(
            id=None,
            file_id=file_id,
            store_id=store_ids[record.store_key],
            type_code=str(record.type_code),
            amount=record.amount,
            transaction_date=record.date,
            transaction_time=record.time,
            cpf=record.cpf,
            card=record.card,
        )

    async def _reject(
        self, file: File, message: str, failure: FailureReason, errors: tuple[str, ...]
    ) -> ProcessingResult:
        file.mark_as_rejected(message)
        await self.db.files.update(file)
        logger.warning("File %s: rejected (%s): %s", file.id, failure.value, message)
        return ProcessingResult(
            file_id=file.id,
            success=False,
            status=file.status,
            failure=failure,
            error_message=message,
            errors=errors,
        )

    async def _terminal_result(self, file: File) -> ProcessingResult:
        if file.status == FileStatus.PROCESSED:
            return ProcessingResult(
                file_id=file.id,
                success=True,
                status=file.status,
                transactions_inserted=await self.db.transactions.count_by_file_id(file.id),
                already_processed=True,
            )
        return ProcessingResult(
            file_id=file.id,
            success=False,
            status=file.status,
            failure=FailureReason.PREVIOUSLY_REJECTED,
            error_message=file.error_message or previously_rejected(),
        )

    async def _safe_rollback(self, file_id: UUID) -> None:
        try:
            await self.db.rollback()
        except Exception:
            logger.exception("File %s: rollback failed", file_id)

    async def reject_after_failure(self, file_id: UUID, exc: BaseException) -> None:
        """Best-effort move to Rejected after an unexpected error.

        Only a file still in Processing is touched. Failures here are logged
        only; the caller re-raises the original error.
        """
        await self._safe_rollback(file_id)
        try:
            current = await self.db.files.get_by_id(file_id)
            if current is not None and current.status == FileStatus.PROCESSING:
                current.mark_as_rejected(truncate_error_message(f"Processing error: {exc}"))
                await self.db.files.update(current)
                logger.warning("File %s: marked as %s after failure", file_id, current.status.value)
        except Exception:
            logger.exception("File %s: could not record failure status", file_id)
