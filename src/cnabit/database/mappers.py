"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic. Repositories return only what
these functions produce, so callers never hold a tracked ORM instance.
"""

from datetime import datetime, UTC
from typing import Optional

from cnabit.domain import entities as domain
from cnabit.database.models import (
    File as ORMFile,
    Store as ORMStore,
    Transaction as ORMTransaction,
    TransactionType as ORMTransactionType,
)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands timezone-aware columns back naive.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def file_to_domain(orm_file: ORMFile) -> domain.File:
    """Convert SQLAlchemy File model to domain File aggregate."""
    return domain.File(
        id=orm_file.id,
        file_name=orm_file.file_name,
        file_size=orm_file.file_size,
        storage_key=orm_file.storage_key,
        uploaded_at=_as_utc(orm_file.uploaded_at),
        status=domain.FileStatus(orm_file.status_code),
        uploaded_by=orm_file.uploaded_by,
        processed_at=_as_utc(orm_file.processed_at),
        error_message=orm_file.error_message,
    )


def apply_file_state(orm_file: ORMFile, file: domain.File) -> None:
    """Copy the mutable state of a domain File onto its ORM row."""
    orm_file.status_code = file.status.value
    orm_file.processed_at = file.processed_at
    orm_file.error_message = file.error_message
    orm_file.storage_key = file.storage_key


def file_to_orm(file: domain.File) -> ORMFile:
    """Build a new SQLAlchemy File row from a domain File."""
    return ORMFile(
        id=file.id,
        file_name=file.file_name,
        file_size=file.file_size,
        storage_key=file.storage_key,
        status_code=file.status.value,
        uploaded_by=file.uploaded_by,
        uploaded_at=file.uploaded_at,
        processed_at=file.processed_at,
        error_message=file.error_message,
    )


def store_to_domain(orm_store: ORMStore) -> domain.Store:
    """Convert SQLAlchemy Store model to domain Store entity."""
    return domain.Store(
        id=orm_store.id,
        name=orm_store.name,
        owner_name=orm_store.owner_name,
        created_at=_as_utc(orm_store.created_at),
        updated_at=_as_utc(orm_store.updated_at),
    )


def store_to_orm(store: domain.Store) -> ORMStore:
    """Build a new SQLAlchemy Store row from a domain Store."""
    return ORMStore(
        id=store.id,
        name=store.name,
        owner_name=store.owner_name,
        created_at=store.created_at,
        updated_at=store.updated_at,
    )


def transaction_type_to_domain(orm_type: ORMTransactionType) -> domain.TransactionType:
    """Convert SQLAlchemy TransactionType model to domain TransactionType entity."""
    return domain.TransactionType(
        type_code=orm_type.type_code,
        description=orm_type.description,
        nature=orm_type.nature,
        sign=orm_type.sign,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        file_id=orm_transaction.file_id,
        store_id=orm_transaction.store_id,
        type_code=orm_transaction.type_code,
        amount=orm_transaction.amount,
        transaction_date=orm_transaction.transaction_date,
        transaction_time=orm_transaction.transaction_time,
        cpf=orm_transaction.cpf,
        card=orm_transaction.card,
        created_at=_as_utc(orm_transaction.created_at),
    )


def transaction_to_orm(transaction: domain.Transaction) -> ORMTransaction:
    """Build a new SQLAlchemy Transaction row; the id is assigned on insert."""
    return ORMTransaction(
        file_id=transaction.file_id,
        store_id=transaction.store_id,
        type_code=transaction.type_code,
        amount=transaction.amount,
        transaction_date=transaction.transaction_date,
        transaction_time=transaction.transaction_time,
        cpf=transaction.cpf,
        card=transaction.card,
    )
