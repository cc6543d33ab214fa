"""Tests for direct record writes."""

import pytest

from src.exceptions import RecordConflictError, ValidationError
from src.import_.dynamic.models import RecordType
from src.services.record_repository import PATIENTS_COLLECTION, RecordRepository
from src.services.record_service import RecordService
from src.services.storage_service import MemoryStore


@pytest.fixture
def repository(memory_store: MemoryStore) -> RecordRepository:
    return RecordRepository(memory_store, PATIENTS_COLLECTION)


@pytest.fixture
def service(repository: RecordRepository) -> RecordService:
    return RecordService(repository, RecordType.PATIENTS)


class TestCreate:
    """Tests for RecordService.create."""

    def test_normalizes_and_stores(self, service: RecordService, repository: RecordRepository) -> None:
        """Test that the stored record carries generated bookkeeping fields."""
        record = service.create({"firstName": "Jane", "lastName": "Doe", "_originalRow": 7})

        assert record["name"] == "Jane Doe"
        assert record["dateCreated"]
        assert "_originalRow" not in record
        assert repository.list_all() == [record]

    def test_ignores_client_timestamps(self, service: RecordService) -> None:
        """Test that dateCreated is always set by the service."""
        record = service.create({"name": "Jane Doe", "dateCreated": "1999-01-01"})
        assert record["dateCreated"] != "1999-01-01"

    def test_rejects_taken_id(self, service: RecordService) -> None:
        """Test that an id can only be created once."""
        service.create({"id": 1, "name": "Jane Doe"})

        with pytest.raises(RecordConflictError, match="Record 1 already exists"):
            service.create({"id": "1", "name": "John Roe"})

    def test_requires_identity(self, service: RecordService, repository: RecordRepository) -> None:
        """Test that a body without identifying values is rejected unsaved."""
        with pytest.raises(ValidationError, match="identifying value"):
            service.create({"city": "Queens"})
        assert repository.list_all() == []


class TestReplace:
    """Tests for RecordService.replace."""

    def test_keeps_id_and_creation_date(self, service: RecordService) -> None:
        """Test that only the body fields change."""
        created = service.create({"name": "Jane Doe", "city": "Queens"})

        replaced = service.replace(created["id"], {"id": "x", "name": "Jane Roe"})

        assert replaced is not None
        assert replaced["id"] == created["id"]
        assert replaced["dateCreated"] == created["dateCreated"]
        assert replaced["lastName"] == "Roe"
        assert "city" not in replaced

    def test_unknown_id(self, service: RecordService) -> None:
        """Test that replacing a missing record returns None."""
        assert service.replace("missing", {"name": "Jane Doe"}) is None
