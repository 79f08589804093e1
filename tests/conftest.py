"""Shared pytest fixtures for cnabit tests."""

import asyncio
from pathlib import Path

import pytest

from cnabit.database.factories import create_sqlite_database
from cnabit.domain.balance import BalanceService
from cnabit.domain.file_processing import FileProcessingService
from cnabit.domain.queries import FileQueryService, TransactionQueryService
from cnabit.domain.upload import FileUploadService
from cnabit.storage.local import LocalFileStorage


@pytest.fixture
def runner():
    """Event loop runner shared by a test and its fixtures."""
    with asyncio.Runner() as r:
        yield r


@pytest.fixture
def temp_db(runner, tmp_path):
    """Create a temporary database for testing."""
    db_path = tmp_path / "cnabit.db"

    db = create_sqlite_database(database_path=str(db_path))
    # Store the path for tests that need it
    db.database_path = str(db_path)
    runner.run(db.connect())
    runner.run(db.initialize_schema())

    yield db

    runner.run(db.disconnect())


@pytest.fixture
def storage(tmp_path):
    """Create a local file storage below the test's temporary directory."""
    return LocalFileStorage(tmp_path / "files")


@pytest.fixture
def upload_service(temp_db, storage):
    """Create a FileUploadService with a temporary database."""
    return FileUploadService(temp_db, storage)


@pytest.fixture
def processing_service(temp_db, storage):
    """Create a FileProcessingService with a temporary database."""
    return FileProcessingService(temp_db, storage)


@pytest.fixture
def balance_service(temp_db):
    """Create a BalanceService with a temporary database."""
    return BalanceService(temp_db)


@pytest.fixture
def file_query_service(temp_db):
    """Create a FileQueryService with a temporary database."""
    return FileQueryService(temp_db)


@pytest.fixture
def transaction_query_service(temp_db):
    """Create a TransactionQueryService with a temporary database."""
    return TransactionQueryService(temp_db)


@pytest.fixture
def upload(runner, upload_service):
    """Upload content and return the UploadResult."""

    def _upload(content: bytes, file_name: str = "CNAB.txt"):
        return runner.run(upload_service.upload(file_name, content))

    return _upload


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
