"""Tests for duplicate reconciliation."""

from src.import_.dynamic.merge import merge_data, merge_records, resolve_duplicate
from src.import_.dynamic.models import DuplicateStrategy, RecordType

NOW = "2026-03-01T12:00:00+00:00"


def _patient(**fields: object) -> dict[str, object]:
    return {"name": "Jane Doe", "phone": "555-0001", **fields}


class TestResolveDuplicate:
    """Tests for resolve_duplicate."""

    def test_overwrite_keeps_existing_id(self) -> None:
        """Test that overwrite takes the incoming record under the existing id."""
        existing = {"id": 1, "name": "Jane Doe", "phone": "555-0001"}
        incoming = {"name": "Jane Doe", "phone": "555-0002"}

        result = resolve_duplicate(existing, incoming, DuplicateStrategy.OVERWRITE)

        assert result == {"id": 1, "name": "Jane Doe", "phone": "555-0002"}

    def test_skip_leaves_existing(self) -> None:
        """Test that skip returns no replacement."""
        assert resolve_duplicate(_patient(id=1), _patient(), DuplicateStrategy.SKIP) is None

    def test_merge_delegates_to_merge_records(self) -> None:
        """Test that merge combines both records."""
        result = resolve_duplicate(
            _patient(id=1, email=""),
            _patient(email="jane@example.com"),
            DuplicateStrategy.MERGE,
            now=NOW,
        )

        assert result is not None
        assert result["id"] == 1
        assert result["email"] == "jane@example.com"
        assert result["lastModified"] == NOW


class TestMergeRecords:
    """Tests for merge_records."""

    def test_empty_incoming_keeps_existing(self) -> None:
        """Test that blank incoming values never erase data."""
        merged = merge_records(_patient(city="Queens"), _patient(city="  "), now=NOW)
        assert merged["city"] == "Queens"

    def test_empty_existing_adopts_incoming(self) -> None:
        """Test that missing existing values are filled in."""
        merged = merge_records(_patient(), _patient(city="Queens"), now=NOW)
        assert merged["city"] == "Queens"

    def test_lists_are_unioned(self) -> None:
        """Test that list fields keep existing order and add new items."""
        merged = merge_records(
            {"serviceZipCodes": ["10001", "10002"]},
            {"serviceZipCodes": ["10002", "10003"]},
            now=NOW,
        )
        assert merged["serviceZipCodes"] == ["10001", "10002", "10003"]

    def test_later_date_wins(self) -> None:
        """Test that date-like fields keep the later date."""
        merged = merge_records(
            {"startDate": "2026-05-01", "lastVisitDate": "1/2/2026"},
            {"startDate": "2026-01-01", "lastVisitDate": "2026-02-01"},
            now=NOW,
        )
        assert merged["startDate"] == "2026-05-01"
        assert merged["lastVisitDate"] == "2026-02-01"

    def test_unparseable_date_takes_incoming(self) -> None:
        """Test that a date that cannot be compared is replaced."""
        merged = merge_records({"startDate": "soon"}, {"startDate": "2026-01-01"}, now=NOW)
        assert merged["startDate"] == "2026-01-01"

    def test_scalar_incoming_wins(self) -> None:
        """Test that other fields take the incoming value."""
        merged = merge_records(_patient(insurance="Aetna"), _patient(insurance="Cigna"), now=NOW)
        assert merged["insurance"] == "Cigna"

    def test_identity_and_creation_preserved(self) -> None:
        """Test that id and dateCreated of the existing record survive."""
        merged = merge_records(
            _patient(id="a", dateCreated="2025-01-01T00:00:00+00:00"),
            _patient(id="b", dateCreated="2026-01-01T00:00:00+00:00"),
            now=NOW,
        )
        assert merged["id"] == "a"
        assert merged["dateCreated"] == "2025-01-01T00:00:00+00:00"

    def test_inputs_not_modified(self) -> None:
        """Test that merging returns a new record."""
        existing = _patient(city="Queens")
        incoming = _patient(city="Bronx")

        merge_records(existing, incoming, now=NOW)

        assert existing["city"] == "Queens"
        assert "lastModified" not in existing


class TestMergeData:
    """Tests for merge_data."""

    def test_new_records_are_appended(self) -> None:
        """Test that unmatched records are imported."""
        result = merge_data(
            [_patient(id=1)],
            [{"id": 2, "name": "John Roe", "phone": "555-0002"}],
            RecordType.PATIENTS,
        )

        assert result.imported == 1
        assert [r["id"] for r in result.records] == [1, 2]

    def test_strategies_count_outcomes(self) -> None:
        """Test updated and skipped counts per strategy."""
        existing = [_patient(id=1, city="Queens")]
        incoming = [_patient(id=9, city="Bronx")]

        merged = merge_data(existing, incoming, RecordType.PATIENTS, DuplicateStrategy.MERGE)
        skipped = merge_data(existing, incoming, RecordType.PATIENTS, DuplicateStrategy.SKIP)

        assert (merged.imported, merged.updated, merged.skipped) == (0, 1, 0)
        assert merged.records[0]["city"] == "Bronx"
        assert merged.records[0]["id"] == 1
        assert (skipped.imported, skipped.updated, skipped.skipped) == (0, 0, 1)
        assert skipped.records == existing

    def test_duplicates_within_batch(self) -> None:
        """Test that a file repeating a person yields one record."""
        result = merge_data(
            [],
            [_patient(id=1, city="Queens"), _patient(id=2, email="jane@example.com")],
            RecordType.PATIENTS,
        )

        assert result.imported == 1
        assert result.updated == 1
        assert len(result.records) == 1
        assert result.records[0]["email"] == "jane@example.com"

    def test_empty_keys_never_match(self) -> None:
        """Test that records without a derivable key are always added."""
        result = merge_data([{"id": 1}], [{"id": 2}, {"id": 3}], RecordType.PATIENTS)

        assert result.imported == 2
        assert len(result.records) == 3

    def test_existing_list_not_modified(self) -> None:
        """Test that the existing record set is left untouched."""
        existing = [_patient(id=1)]
        merge_data(existing, [{"id": 2, "name": "John Roe"}], RecordType.PATIENTS)
        assert len(existing) == 1

    def test_disjoint_sets_commute(self) -> None:
        """Test that import order does not matter for disjoint key sets."""
        a = [_patient(id=1)]
        b = [{"id": 2, "name": "John Roe", "phone": "555-0002"}]

        ab = merge_data(merge_data([], a, RecordType.PATIENTS).records, b, RecordType.PATIENTS)
        ba = merge_data(merge_data([], b, RecordType.PATIENTS).records, a, RecordType.PATIENTS)

        def by_id(records: list[dict]) -> list[dict]:
            return sorted(records, key=lambda r: r["id"])

        assert by_id(ab.records) == by_id(ba.records)
