"""File upload domain service."""

import logging
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, UTC
from pathlib import PurePosixPath, PureWindowsPath
from typing import Optional
from uuid import UUID

from cnabit.database.base import Database
from cnabit.domain.entities import File, FileStatus
from cnabit.domain.errors import ValidationError
from cnabit.storage.base import FileStorage

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024
MAX_FILE_NAME_LENGTH = 255
STORAGE_KEY_PREFIX = "cnab"

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a successful upload."""

    file_id: UUID
    file_name: str
    storage_key: str
    file_size: int
    status: FileStatus


def sanitize_file_name(file_name: str) -> str:
    """Reduce a client supplied name to a safe base name.

    Path components are stripped, characters outside ``[A-Za-z0-9._-]`` are
    dropped and the result is capped at 255 characters.

    Raises:
        ValidationError: If nothing usable is left
    """
    # Handle both separators regardless of the host platform.
    base_name = PureWindowsPath(PurePosixPath(file_name.strip()).name).name
    cleaned = _UNSAFE_NAME_CHARS.sub("", base_name)[:MAX_FILE_NAME_LENGTH]
    if not cleaned.strip("."):
        raise ValidationError("File name is invalid.")
    return cleaned


class FileUploadService:
    """Service for accepting CNAB files into storage."""

    def __init__(self, db: Database, storage: FileStorage):
        """Initialize upload service.

        Args:
            db: Database instance
            storage: Storage the raw content is written to
        """
        self.db = db
        self.storage = storage

    async def upload(self, file_name: str, content: bytes, uploaded_by: Optional[str] = None) -> UploadResult:
        """Store a file and register it for processing.

        Content is written to storage before the File row is inserted, so a
        storage failure leaves no record behind.

        Args:
            file_name: Name supplied by the client
            content: Raw file content
            uploaded_by: Optional identity of the uploader

        Returns:
            UploadResult describing the new File in Uploaded state

        Raises:
            ValidationError: If the content is empty, too large or the name unusable
            StorageError: If the content could not be stored
        """
        if not content:
            raise ValidationError("File cannot be empty.")
        if len(content) > MAX_FILE_SIZE:
            raise ValidationError(f"File size must not exceed {MAX_FILE_SIZE // (1024 * 1024)}MB.")

        safe_name = sanitize_file_name(file_name)
        file_id = uuid.uuid4()
        storage_key = f"{STORAGE_KEY_PREFIX}/{file_id}/{safe_name}"

        await self.storage.write(storage_key, content)

        file = File(
            id=file_id,
            file_name=safe_name,
            file_size=len(content),
            storage_key=storage_key,
            uploaded_at=datetime.now(UTC),
            uploaded_by=uploaded_by,
        )
        await self.db.files.add(file)

        logger.info("File %s uploaded as %s (%d bytes)", file_id, storage_key, len(content))
        return UploadResult(
            file_id=file_id,
            file_name=safe_name,
            storage_key=storage_key,
            file_size=len(content),
            status=file.status,
        )
