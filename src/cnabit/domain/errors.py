"""Shared domain error messages and error types."""

from uuid import UUID


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class InvalidStatusTransitionError(DomainError):
    """A file status change that the lifecycle does not allow."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move file from {current} to {target}")


class StorageError(Exception):
    """Blob storage could not be reached or failed to serve a request."""


class StorageObjectNotFoundError(StorageError):
    """The requested object does not exist in storage."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Storage object '{key}' not found")


def file_not_found(file_id: UUID | str) -> str:
    """Return message for missing file."""
    return f"File not found: {file_id}"


def store_not_found(store_id: UUID | str) -> str:
    """Return message for missing store."""
    return f"Store {store_id} not found"


def transaction_type_not_found(type_code: str) -> str:
    """Return message for unknown transaction type code."""
    return f"Transaction type '{type_code}' not found"


def duplicate_store(name: str, owner_name: str) -> str:
    """Return message for a store business-key collision."""
    return f"Store '{name}' owned by '{owner_name}' already exists"


def previously_rejected() -> str:
    return "File was previously rejected"
