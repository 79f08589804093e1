"""Tests for the SQLAlchemy database and its repositories."""

import uuid
from dataclasses import replace
from datetime import datetime, date, time, timedelta, UTC

import pytest
from sqlalchemy.exc import IntegrityError

from cnabit.database.base import Database
from cnabit.database.factories import create_sqlite_database
from cnabit.domain.entities import File, FileStatus, Store, Transaction, TransactionFilter
from cnabit.domain.errors import ConflictError, NotFoundError


def _file(uploaded_at: datetime | None = None, status: FileStatus = FileStatus.UPLOADED) -> File:
    file_id = uuid.uuid4()
    return File(
        id=file_id,
        file_name="CNAB.txt",
        file_size=80,
        storage_key=f"cnab/{file_id}/CNAB.txt",
        uploaded_at=uploaded_at or datetime.now(UTC),
        status=status,
    )


def _store(name: str = "BAR DO JOAO", owner_name: str = "JOAO MACEDO") -> Store:
    now = datetime.now(UTC)
    return Store(id=uuid.uuid4(), name=name, owner_name=owner_name, created_at=now, updated_at=now)


def _transaction(file_id, store_id, type_code="4", amount=1000, day=1) -> Transaction:
    return Transaction(
        id=None,
        file_id=file_id,
        store_id=store_id,
        type_code=type_code,
        amount=amount,
        transaction_date=date(2019, 3, day),
        transaction_time=time(12, 0),
        cpf="09620676017",
        card="4753****3153",
    )


def test_implements_interface(temp_db):
    """Test that the SQLAlchemy database is a Database."""
    assert isinstance(temp_db, Database)


class TestFileRepository:
    """Tests for file persistence."""

    def test_add_and_get(self, runner, temp_db):
        """Test storing and loading a file."""
        file = _file()
        runner.run(temp_db.files.add(file))

        loaded = runner.run(temp_db.files.get_by_id(file.id))
        assert loaded == file

    def test_get_missing(self, runner, temp_db):
        """Test that an unknown id returns None."""
        assert runner.run(temp_db.files.get_by_id(uuid.uuid4())) is None

    def test_update_status(self, runner, temp_db):
        """Test that status changes are persisted."""
        file = _file()
        runner.run(temp_db.files.add(file))

        file.start_processing()
        file.mark_as_rejected("Processing error: boom")
        runner.run(temp_db.files.update(file))

        loaded = runner.run(temp_db.files.get_by_id(file.id))
        assert loaded.status == FileStatus.REJECTED
        assert loaded.error_message == "Processing error: boom"
        assert loaded.processed_at is not None

    def test_update_missing(self, runner, temp_db):
        """Test that updating an unknown file raises NotFoundError."""
        with pytest.raises(NotFoundError):
            runner.run(temp_db.files.update(_file()))

    def test_list_files_by_status(self, runner, temp_db):
        """Test listing files newest first and filtering by status."""
        base = datetime(2025, 1, 1, tzinfo=UTC)
        older = _file(base)
        newer = _file(base + timedelta(hours=1), FileStatus.PROCESSED)
        runner.run(temp_db.files.add(older))
        runner.run(temp_db.files.add(newer))

        assert [f.id for f in runner.run(temp_db.files.list_files())] == [newer.id, older.id]
        assert [f.id for f in runner.run(temp_db.files.list_files(FileStatus.UPLOADED))] == [older.id]

    def test_list_pending(self, runner, temp_db):
        """Test that only non-terminal files are pending, oldest first."""
        base = datetime(2025, 1, 1, tzinfo=UTC)
        processing = _file(base + timedelta(minutes=2), FileStatus.PROCESSING)
        uploaded = _file(base + timedelta(minutes=1))
        done = _file(base, FileStatus.PROCESSED)
        for f in (processing, uploaded, done):
            runner.run(temp_db.files.add(f))

        pending = runner.run(temp_db.files.list_pending())
        assert [f.id for f in pending] == [uploaded.id, processing.id]


class TestStoreRepository:
    """Tests for store persistence."""

    def test_add_and_lookup(self, runner, temp_db):
        """Test finding a store by id and by business key."""
        store = _store()
        runner.run(temp_db.stores.add(store))

        assert runner.run(temp_db.stores.get_by_id(store.id)).business_key == store.business_key
        found = runner.run(temp_db.stores.get_by_name_and_owner("BAR DO JOAO", "JOAO MACEDO"))
        assert found.id == store.id
        assert runner.run(temp_db.stores.get_by_name_and_owner("BAR DO JOAO", "OUTRO DONO")) is None

    def test_duplicate_business_key(self, runner, temp_db):
        """Test that the unique constraint surfaces as ConflictError."""
        runner.run(temp_db.stores.add(_store()))

        with pytest.raises(ConflictError):
            runner.run(temp_db.stores.add(_store()))

        # The session is usable again afterwards
        runner.run(temp_db.stores.add(_store(name="OUTRA LOJA")))
        assert len(runner.run(temp_db.stores.list_stores())) == 2

    def test_same_name_other_owner(self, runner, temp_db):
        """Test that the business key is the pair, not the name alone."""
        runner.run(temp_db.stores.add(_store(owner_name="JOAO MACEDO")))
        runner.run(temp_db.stores.add(_store(owner_name="MARIA SILVA")))

        assert len(runner.run(temp_db.stores.list_stores())) == 2

    def test_update_touches_timestamp(self, runner, temp_db):
        """Test that update persists the new updated_at."""
        store = _store()
        runner.run(temp_db.stores.add(store))

        later = store.updated_at + timedelta(days=1)
        runner.run(temp_db.stores.update(replace(store, updated_at=later)))
        assert runner.run(temp_db.stores.get_by_id(store.id)).updated_at == later

    def test_list_balances(self, runner, temp_db):
        """Test the query-time balance aggregate."""
        file = _file()
        runner.run(temp_db.files.add(file))
        bar = _store("BAR DO JOAO")
        empty = _store("ARMAZEM VAZIO")
        runner.run(temp_db.stores.add(bar))
        runner.run(temp_db.stores.add(empty))
        runner.run(
            temp_db.transactions.add_range(
                [
                    _transaction(file.id, bar.id, "4", 1000),
                    _transaction(file.id, bar.id, "2", 300),
                    _transaction(file.id, bar.id, "9", 200),
                ]
            )
        )

        balances = runner.run(temp_db.stores.list_balances())
        assert [b.store.name for b in balances] == ["ARMAZEM VAZIO", "BAR DO JOAO"]
        assert balances[0].balance == 0
        assert balances[0].transaction_count == 0
        assert balances[1].balance == 500
        assert balances[1].transaction_count == 3

        single = runner.run(temp_db.stores.get_balance(bar.id))
        assert single.balance == 500
        assert runner.run(temp_db.stores.get_balance(uuid.uuid4())) is None


class TestTransactionRepository:
    """Tests for transaction persistence."""

    @pytest.fixture
    def seeded(self, runner, temp_db):
        file = _file()
        other_file = _file()
        bar = _store("BAR DO JOAO")
        shop = _store("LOJA CENTRO", "JOAO SILVA")
        runner.run(temp_db.files.add(file))
        runner.run(temp_db.files.add(other_file))
        runner.run(temp_db.stores.add(bar))
        runner.run(temp_db.stores.add(shop))
        runner.run(
            temp_db.transactions.add_range(
                [
                    _transaction(file.id, bar.id, "4", 100, day=1),
                    _transaction(file.id, shop.id, "2", 200, day=2),
                    _transaction(file.id, bar.id, "3", 300, day=3),
                    _transaction(other_file.id, shop.id, "4", 400, day=4),
                ]
            )
        )
        return file, other_file, bar, shop

    def test_insertion_order(self, runner, temp_db, seeded):
        """Test that ids follow the insertion order."""
        file, _, _, _ = seeded
        transactions = runner.run(temp_db.transactions.get_by_file_id(file.id))

        assert [t.amount for t in transactions] == [100, 200, 300]
        assert [t.id for t in transactions] == sorted(t.id for t in transactions)

    def test_count_by_file(self, runner, temp_db, seeded):
        """Test counting transactions of a file."""
        file, other_file, _, _ = seeded

        assert runner.run(temp_db.transactions.count_by_file_id(file.id)) == 3
        assert runner.run(temp_db.transactions.count_by_file_id(other_file.id)) == 1
        assert runner.run(temp_db.transactions.count_by_file_id(uuid.uuid4())) == 0

    def test_by_store(self, runner, temp_db, seeded):
        """Test listing transactions of a store."""
        _, _, _, shop = seeded
        transactions = runner.run(temp_db.transactions.get_by_store_id(shop.id))

        assert [t.amount for t in transactions] == [200, 400]

    def test_filters(self, runner, temp_db, seeded):
        """Test date range, type and limit filters."""
        filters = TransactionFilter(start_date=date(2019, 3, 2), end_date=date(2019, 3, 3))
        assert [t.amount for t in runner.run(temp_db.transactions.list_transactions(filters))] == [200, 300]

        by_type = runner.run(temp_db.transactions.list_transactions(TransactionFilter(type_code="4")))
        assert [t.amount for t in by_type] == [100, 400]

        limited = runner.run(temp_db.transactions.list_transactions(TransactionFilter(limit=2)))
        assert len(limited) == 2

    def test_non_positive_amount_rejected(self, runner, temp_db, seeded):
        """Test the database check constraint on amounts."""
        file, _, bar, _ = seeded
        with pytest.raises(IntegrityError):
            runner.run(temp_db.transactions.add_range([_transaction(file.id, bar.id, amount=0)]))
        runner.run(temp_db.rollback())


class TestTransactionTypes:
    """Tests for the seeded transaction type lookup."""

    def test_seeded_signs(self, runner, temp_db):
        """Test the canonical sign mapping."""
        types = runner.run(temp_db.transaction_types.list_types())

        assert [t.type_code for t in types] == [str(code) for code in range(1, 10)]
        assert {t.type_code for t in types if t.sign == "+"} == {"1", "4", "5", "6", "7", "8"}
        assert {t.type_code for t in types if t.sign == "-"} == {"2", "3", "9"}

    def test_get_by_code(self, runner, temp_db):
        """Test looking up a single type."""
        rent = runner.run(temp_db.transaction_types.get_by_code("9"))

        assert rent.description == "Rent"
        assert rent.sign_multiplier == -1
        assert runner.run(temp_db.transaction_types.get_by_code("0")) is None

    def test_initialize_schema_is_idempotent(self, runner, temp_db):
        """Test that seeding twice does not duplicate lookups."""
        runner.run(temp_db.initialize_schema())

        assert len(runner.run(temp_db.transaction_types.list_types())) == 9


class TestUnitOfWork:
    """Tests for explicit transactions."""

    def test_rollback_discards_writes(self, runner, temp_db):
        """Test that writes inside a unit of work vanish on rollback."""
        runner.run(temp_db.begin_transaction())
        assert temp_db.in_transaction
        runner.run(temp_db.stores.add(_store()))
        # Flushed writes are visible inside the unit of work
        assert len(runner.run(temp_db.stores.list_stores())) == 1

        runner.run(temp_db.rollback())
        assert not temp_db.in_transaction
        assert runner.run(temp_db.stores.list_stores()) == []

    def test_commit_persists_writes(self, runner, temp_db):
        """Test that committed writes are visible to another connection."""
        runner.run(temp_db.begin_transaction())
        runner.run(temp_db.stores.add(_store()))
        runner.run(temp_db.commit())

        other = create_sqlite_database(database_path=temp_db.database_path)
        try:
            assert len(runner.run(other.stores.list_stores())) == 1
        finally:
            runner.run(other.disconnect())

    def test_conflict_inside_unit_of_work(self, runner, temp_db):
        """Test that a duplicate store inside a unit of work can be rolled back."""
        runner.run(temp_db.stores.add(_store()))

        runner.run(temp_db.begin_transaction())
        runner.run(temp_db.stores.add(_store("OUTRA LOJA")))
        with pytest.raises(ConflictError):
            runner.run(temp_db.stores.add(_store()))
        runner.run(temp_db.rollback())

        assert [s.name for s in runner.run(temp_db.stores.list_stores())] == ["BAR DO JOAO"]
