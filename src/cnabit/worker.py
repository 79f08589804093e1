"""Local processing worker.

Drives ``FileProcessingService`` for files that still need processing and
retries infrastructure failures with exponential backoff. Permanent outcomes
(a Processed or Rejected file, an unknown id) are never retried.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional
from uuid import UUID

from sqlalchemy.exc import DBAPIError, IntegrityError

from cnabit.database.base import Database
from cnabit.domain.errors import ConflictError, StorageError, StorageObjectNotFoundError
from cnabit.domain.file_processing import FileProcessingService, ProcessingResult
from cnabit.storage.base import FileStorage

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
BACKOFF_BASE_SECONDS = 2.0


def is_transient(exc: BaseException) -> bool:
    """Tell whether retrying the whole pipeline may succeed."""
    if isinstance(exc, StorageObjectNotFoundError):
        return False
    if isinstance(exc, (StorageError, ConflictError)):
        return True
    if isinstance(exc, IntegrityError):
        return False
    if isinstance(exc, DBAPIError):
        return True
    return isinstance(exc, (ConnectionError, TimeoutError))


@dataclass
class WorkerReport:
    """Counts of what a batch run did."""

    processed: int = 0
    rejected: int = 0
    failed: int = 0
    results: list[ProcessingResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.processed + self.rejected + self.failed


class FileProcessingWorker:
    """Processes pending files one after another."""

    def __init__(
        self,
        db: Database,
        storage: FileStorage,
        max_attempts: int = MAX_ATTEMPTS,
        backoff_base: float = BACKOFF_BASE_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        service: Optional[FileProcessingService] = None,
    ):
        """Initialize worker.

        Args:
            db: Database instance
            storage: Storage holding the raw file content
            max_attempts: Attempts per file before giving up on transient errors
            backoff_base: Delay before retry n is backoff_base ** n seconds
            sleep: Coroutine used to wait between attempts
            service: Processing service to use instead of a default one
        """
        self.db = db
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self._sleep = sleep
        self.service = service or FileProcessingService(db, storage)

    async def process_file(self, file_id: UUID) -> ProcessingResult:
        """Process one file, retrying transient failures.

        The file stays in Processing between attempts. It is marked Rejected
        only once the worker gives up on it.

        Raises:
            Exception: The last error once it is permanent or attempts run out
        """
        attempt = 1
        while True:
            try:
                return await self.service.process_file(file_id, record_failure=False)
            except Exception as exc:
                if not is_transient(exc) or attempt >= self.max_attempts:
                    await self.service.reject_after_failure(file_id, exc)
                    raise
                delay = self.backoff_base ** attempt
                logger.warning(
                    "File %s: transient failure on attempt %d/%d (%s), retrying in %.1fs",
                    file_id,
                    attempt,
                    self.max_attempts,
                    exc,
                    delay,
                )
                await self._sleep(delay)
                attempt += 1

    async def process_pending(self) -> WorkerReport:
        """Process every Uploaded or Processing file, oldest first."""
        report = WorkerReport()
        pending = await self.db.files.list_pending()
        logger.info("Found %d pending file(s)", len(pending))

        for file in pending:
            try:
                result = await self.process_file(file.id)
            except Exception:
                logger.exception("File %s: giving up", file.id)
                report.failed += 1
                continue

            report.results.append(result)
            if result.success:
                report.processed += 1
            else:
                report.rejected += 1

        logger.info(
            "Batch finished: %d processed, %d rejected, %d failed",
            report.processed,
            report.rejected,
            report.failed,
        )
        return report
