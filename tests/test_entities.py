"""Tests for domain entities."""

import uuid
from datetime import datetime, date, time, UTC

import pytest

from cnabit.domain.entities import CNABRecord, File, FileStatus, Store, TransactionType
from cnabit.domain.errors import DomainError, InvalidStatusTransitionError


def _file(status: FileStatus = FileStatus.UPLOADED) -> File:
    return File(
        id=uuid.uuid4(),
        file_name="CNAB.txt",
        file_size=800,
        storage_key="cnab/x/CNAB.txt",
        uploaded_at=datetime.now(UTC),
        status=status,
    )


class TestFileStatus:
    """Tests for FileStatus."""

    def test_terminal_states(self):
        """Test that only Processed and Rejected are terminal."""
        assert not FileStatus.UPLOADED.is_terminal
        assert not FileStatus.PROCESSING.is_terminal
        assert FileStatus.PROCESSED.is_terminal
        assert FileStatus.REJECTED.is_terminal

    def test_values(self):
        """Test the stored status codes."""
        assert [s.value for s in FileStatus] == ["Uploaded", "Processing", "Processed", "Rejected"]


class TestFile:
    """Tests for the File state machine."""

    def test_new_file_is_uploaded(self):
        """Test the default state of a new file."""
        file = _file()

        assert file.status == FileStatus.UPLOADED
        assert file.processed_at is None
        assert file.error_message is None

    def test_happy_path(self):
        """Test Uploaded -> Processing -> Processed."""
        file = _file()
        file.start_processing()
        assert file.status == FileStatus.PROCESSING

        file.mark_as_processed()
        assert file.status == FileStatus.PROCESSED
        assert file.processed_at is not None
        assert file.error_message is None
        assert file.is_terminal

    def test_rejection(self):
        """Test Processing -> Rejected records the reason."""
        file = _file()
        file.start_processing()
        file.mark_as_rejected("File validation failed: Line 1: bad")

        assert file.status == FileStatus.REJECTED
        assert file.error_message == "File validation failed: Line 1: bad"
        assert file.processed_at is not None

    def test_rejection_requires_message(self):
        """Test that a rejected file always carries a message."""
        file = _file(FileStatus.PROCESSING)

        with pytest.raises(ValueError):
            file.mark_as_rejected("   ")
        assert file.status == FileStatus.PROCESSING

    @pytest.mark.parametrize(
        "status,action",
        [
            (FileStatus.UPLOADED, "mark_as_processed"),
            (FileStatus.PROCESSING, "start_processing"),
            (FileStatus.PROCESSED, "start_processing"),
            (FileStatus.REJECTED, "mark_as_processed"),
            (FileStatus.PROCESSED, "mark_as_processed"),
        ],
    )
    def test_illegal_transitions(self, status, action):
        """Test that transitions outside the lifecycle raise."""
        file = _file(status)

        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            getattr(file, action)()
        assert file.status == status
        assert exc_info.value.current == status.value

    def test_uploaded_cannot_be_rejected(self):
        """Test that rejection is only possible while processing."""
        file = _file()

        with pytest.raises(InvalidStatusTransitionError):
            file.mark_as_rejected("boom")

    def test_transition_error_is_domain_error(self):
        """Test that transition errors keep ValueError compatibility."""
        assert issubclass(InvalidStatusTransitionError, DomainError)
        assert issubclass(InvalidStatusTransitionError, ValueError)


class TestStore:
    """Tests for Store entity."""

    def test_business_key(self):
        """Test that a store is keyed by name and owner."""
        now = datetime.now(UTC)
        store = Store(id=uuid.uuid4(), name="BAR DO JOAO", owner_name="JOAO MACEDO", created_at=now, updated_at=now)

        assert store.business_key == ("BAR DO JOAO", "JOAO MACEDO")

    def test_store_immutability(self):
        """Test that Store entities are immutable."""
        now = datetime.now(UTC)
        store = Store(id=uuid.uuid4(), name="A", owner_name="B", created_at=now, updated_at=now)

        with pytest.raises(Exception):  # dataclass frozen raises FrozenInstanceError
            store.name = "C"


class TestTransactionType:
    """Tests for TransactionType entity."""

    def test_sign_multiplier(self):
        """Test that the sign maps to +1 or -1."""
        credit = TransactionType(type_code="4", description="Credit", nature="Income", sign="+")
        debit = TransactionType(type_code="2", description="Boleto", nature="Expense", sign="-")

        assert credit.sign_multiplier == 1
        assert credit.is_credit
        assert debit.sign_multiplier == -1
        assert not debit.is_credit

    def test_invalid_sign(self):
        """Test that an unknown sign cannot be applied."""
        broken = TransactionType(type_code="4", description="Credit", nature="Income", sign="?")

        with pytest.raises(ValueError):
            broken.sign_multiplier


class TestCNABRecord:
    """Tests for CNABRecord."""

    def test_store_key(self):
        """Test that records group by store name then owner."""
        record = CNABRecord(
            line_number=1,
            type_code=3,
            date=date(2019, 3, 1),
            amount=14200,
            cpf="09620676017",
            card="4753****3153",
            time=time(15, 34, 53),
            owner_name="JOAO MACEDO",
            store_name="BAR DO JOAO",
        )

        assert record.store_key == ("BAR DO JOAO", "JOAO MACEDO")
