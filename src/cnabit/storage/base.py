"""Abstract blob storage interface for uploaded CNAB files."""

from abc import ABC, abstractmethod


class FileStorage(ABC):
    """Key/value storage of raw file content.

    Implementations raise ``StorageObjectNotFoundError`` for a missing key and
    ``StorageError`` for any other failure.
    """

    @abstractmethod
    async def read(self, key: str) -> bytes:
        """Read the full content stored under key."""
        pass

    @abstractmethod
    async def write(self, key: str, data: bytes) -> str:
        """Store data under key, replacing any previous content. Returns the key."""
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether key holds an object."""
        pass
