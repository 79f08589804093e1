"""SQLAlchemy models for cnabit database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    BigInteger,
    String,
    ForeignKey,
    DateTime,
    Date,
    Time,
    Boolean,
    Uuid,
    UniqueConstraint,
    CheckConstraint,
    Index,
    event,
    select,
)
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.pool import NullPool

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class FileStatus(Base):
    """File status lookup model."""

    __tablename__ = "file_statuses"

    status_code = Column(String(50), primary_key=True)
    description = Column(String(200), nullable=False)
    is_terminal = Column(Boolean, nullable=False, default=False)


class File(Base):
    """Uploaded CNAB file model."""

    __tablename__ = "files"

    id = Column(Uuid, primary_key=True)
    file_name = Column(String(255), nullable=False)
    file_size = Column(BigInteger, nullable=False)
    storage_key = Column(String(500), nullable=False)
    status_code = Column(
        String(50), ForeignKey("file_statuses.status_code"), nullable=False, default="Uploaded"
    )
    uploaded_by = Column(String(100), nullable=True)
    uploaded_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    processed_at = Column(DateTime(timezone=True), nullable=True)
    error_message = Column(String(1000), nullable=True)

    __table_args__ = (
        Index("ix_files_status_code", "status_code"),
        Index("ix_files_uploaded_at", "uploaded_at"),
    )

    # Relationships
    transactions = relationship(
        "Transaction", back_populates="file", cascade="all, delete-orphan", passive_deletes=True
    )


class Store(Base):
    """Store model keyed by (name, owner_name)."""

    __tablename__ = "stores"

    id = Column(Uuid, primary_key=True)
    name = Column(String(19), nullable=False)
    owner_name = Column(String(14), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("name", "owner_name", name="uq_store_name_owner"),)

    # Relationships
    transactions = relationship("Transaction", back_populates="store")


class TransactionType(Base):
    """Transaction type lookup model; owns the credit/debit sign."""

    __tablename__ = "transaction_types"

    type_code = Column(String(1), primary_key=True)
    description = Column(String(50), nullable=False)
    nature = Column(String(20), nullable=False)
    sign = Column(String(1), nullable=False)

    __table_args__ = (CheckConstraint("sign IN ('+', '-')", name="ck_transaction_type_sign"),)


class Transaction(Base):
    """Transaction model. Amount is an unsigned count of centavos."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_id = Column(Uuid, ForeignKey("files.id", ondelete="CASCADE"), nullable=False)
    store_id = Column(Uuid, ForeignKey("stores.id", ondelete="RESTRICT"), nullable=False)
    type_code = Column(
        String(1), ForeignKey("transaction_types.type_code", ondelete="RESTRICT"), nullable=False
    )
    amount = Column(BigInteger, nullable=False)
    transaction_date = Column(Date, nullable=False)
    transaction_time = Column(Time, nullable=False)
    cpf = Column(String(11), nullable=False)
    card = Column(String(12), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
        Index("ix_transactions_file_id", "file_id"),
        Index("ix_transactions_store_id", "store_id"),
    )

    # Relationships
    file = relationship("File", back_populates="transactions")
    store = relationship("Store", back_populates="transactions")
    transaction_type = relationship("TransactionType")


FILE_STATUS_SEED = (
    ("Uploaded", "File uploaded, awaiting processing", False),
    ("Processing", "File currently being processed", False),
    ("Processed", "File successfully processed", True),
    ("Rejected", "File rejected due to validation or processing errors", True),
)

# Canonical sign mapping. Code never hardcodes credit/debit; it reads this table.
TRANSACTION_TYPE_SEED = (
    ("1", "Debit", "Income", "+"),
    ("2", "Boleto", "Expense", "-"),
    ("3", "Financing", "Expense", "-"),
    ("4", "Credit", "Income", "+"),
    ("5", "Loan Receipt", "Income", "+"),
    ("6", "Sales", "Income", "+"),
    ("7", "TED Receipt", "Income", "+"),
    ("8", "DOC Receipt", "Income", "+"),
    ("9", "Rent", "Expense", "-"),
)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_for_url(database_url: str) -> AsyncEngine:
    """Create an async engine; SQLite gets foreign keys and no pooling."""
    if database_url.startswith("sqlite"):
        engine = create_async_engine(database_url, echo=False, poolclass=NullPool)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_async_engine(database_url, echo=False)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a SQLAlchemy async session factory."""
    return async_sessionmaker(bind=engine, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create tables and seed the lookup tables if they are empty."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = create_session_factory(engine)
    async with factory() as session:
        async with session.begin():
            existing_statuses = set((await session.scalars(select(FileStatus.status_code))).all())
            for code, description, is_terminal in FILE_STATUS_SEED:
                if code not in existing_statuses:
                    session.add(FileStatus(status_code=code, description=description, is_terminal=is_terminal))

            existing_types = set((await session.scalars(select(TransactionType.type_code))).all())
            for code, description, nature, sign in TRANSACTION_TYPE_SEED:
                if code not in existing_types:
                    session.add(
                        TransactionType(type_code=code, description=description, nature=nature, sign=sign)
                    )
