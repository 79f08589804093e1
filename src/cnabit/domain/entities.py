"""Domain model entities for cnabit.

These are plain data classes representing business concepts, independent of
the database schema. Repositories hand these out instead of ORM rows, so no
change tracking leaks past the persistence layer.
"""

from dataclasses import dataclass
from datetime import datetime, date, time, UTC
from enum import Enum
from typing import Optional
from uuid import UUID

from cnabit.domain.errors import InvalidStatusTransitionError


class FileStatus(str, Enum):
    """Lifecycle states of an uploaded CNAB file."""

    UPLOADED = "Uploaded"
    PROCESSING = "Processing"
    PROCESSED = "Processed"
    REJECTED = "Rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (FileStatus.PROCESSED, FileStatus.REJECTED)


# Allowed status transitions; terminal states have none.
_TRANSITIONS: dict[FileStatus, frozenset[FileStatus]] = {
    FileStatus.UPLOADED: frozenset({FileStatus.PROCESSING}),
    FileStatus.PROCESSING: frozenset({FileStatus.PROCESSED, FileStatus.REJECTED}),
    FileStatus.PROCESSED: frozenset(),
    FileStatus.REJECTED: frozenset(),
}


@dataclass
class File:
    """Uploaded CNAB file aggregate root.

    Unlike the other entities this one is mutable: the processing pipeline
    walks it through its status state machine and then persists the whole
    aggregate back through ``FileRepository.update``.
    """

    id: UUID
    file_name: str
    file_size: int
    storage_key: str
    uploaded_at: datetime
    status: FileStatus = FileStatus.UPLOADED
    uploaded_by: Optional[str] = None
    processed_at: Optional[datetime] = None
    error_message: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def _transition(self, target: FileStatus) -> None:
        if target not in _TRANSITIONS[self.status]:
            raise InvalidStatusTransitionError(self.status.value, target.value)
        self.status = target

    def start_processing(self) -> None:
        """Move from Uploaded to Processing."""
        self._transition(FileStatus.PROCESSING)

    def mark_as_processed(self) -> None:
        """Move from Processing to Processed and stamp the completion time."""
        self._transition(FileStatus.PROCESSED)
        self.processed_at = datetime.now(UTC)
        self.error_message = None

    def mark_as_rejected(self, error_message: str) -> None:
        """Move from Processing to Rejected, recording why.

        Raises:
            ValueError: If error_message is empty
        """
        if not error_message or not error_message.strip():
            raise ValueError("A rejected file requires a non-empty error message")
        self._transition(FileStatus.REJECTED)
        self.processed_at = datetime.now(UTC)
        self.error_message = error_message


@dataclass(frozen=True)
class Store:
    """Store domain entity, identified by its (name, owner_name) business key."""

    id: UUID
    name: str
    owner_name: str
    created_at: datetime
    updated_at: datetime

    @property
    def business_key(self) -> tuple[str, str]:
        return (self.name, self.owner_name)


@dataclass(frozen=True)
class TransactionType:
    """Transaction type lookup entry; the only source of truth for signs."""

    type_code: str
    description: str
    nature: str
    sign: str

    @property
    def sign_multiplier(self) -> int:
        if self.sign == "+":
            return 1
        if self.sign == "-":
            return -1
        raise ValueError(f"Invalid sign value '{self.sign}' for type {self.type_code}. Must be '+' or '-'.")

    @property
    def is_credit(self) -> bool:
        return self.sign == "+"


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``amount`` is always the unsigned magnitude in minor units (centavos).
    The direction comes from the TransactionType lookup, never from here.
    ``id`` is None until the row has been inserted.
    """

    id: Optional[int]
    file_id: UUID
    store_id: UUID
    type_code: str
    amount: int
    transaction_date: date
    transaction_time: time
    cpf: str
    card: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CNABRecord:
    """One decoded CNAB line."""

    line_number: int
    type_code: int
    date: date
    amount: int
    cpf: str
    card: str
    time: time
    owner_name: str
    store_name: str

    @property
    def store_key(self) -> tuple[str, str]:
        return (self.store_name, self.owner_name)


@dataclass(frozen=True)
class StoreBalance:
    """Store together with its balance derived from transactions."""

    store: Store
    balance: int
    transaction_count: int


@dataclass(frozen=True)
class TransactionFilter:
    """Optional filters for transaction listings."""

    store_id: Optional[UUID] = None
    file_id: Optional[UUID] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    type_code: Optional[str] = None
    limit: Optional[int] = None
