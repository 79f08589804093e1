"""Filesystem-backed file storage."""

import asyncio
import logging
from pathlib import Path

from cnabit.domain.errors import StorageError, StorageObjectNotFoundError
from cnabit.storage.base import FileStorage

logger = logging.getLogger(__name__)


class LocalFileStorage(FileStorage):
    """Stores each key as a file below a root directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root).expanduser().resolve()

    def _path_for(self, key: str) -> Path:
        if not key or key.startswith("/"):
            raise StorageError(f"Invalid storage key {key!r}")
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root):
            raise StorageError(f"Storage key {key!r} escapes the storage root")
        return path

    async def read(self, key: str) -> bytes:
        path = self._path_for(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as exc:
            raise StorageObjectNotFoundError(key) from exc
        except OSError as exc:
            raise StorageError(f"Local read failed for {key!r}: {exc}") from exc

    async def write(self, key: str, data: bytes) -> str:
        path = self._path_for(key)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            raise StorageError(f"Local write failed for {key!r}: {exc}") from exc
        logger.debug("Wrote %d bytes to %s", len(data), path)
        return key

    async def exists(self, key: str) -> bool:
        path = self._path_for(key)
        return await asyncio.to_thread(path.is_file)
