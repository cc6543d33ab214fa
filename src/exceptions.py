"""Custom exceptions for Carelink service."""


class CarelinkError(Exception):
    """Base exception for Carelink errors."""

    pass


class ValidationError(CarelinkError):
    """Error during input validation."""

    pass


class RowError(CarelinkError):
    """A single CSV data row could not be turned into a record."""

    def __init__(self, row_number: int, message: str):
        super().__init__(f"Row {row_number}: {message}")
        self.row_number = row_number
        self.message = message


class StorageError(CarelinkError):
    """Error during storage operations."""

    pass


class RecordConflictError(CarelinkError):
    """A record with the same id already exists."""

    pass
