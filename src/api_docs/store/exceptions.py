"""Endpoint store exceptions."""

from typing import Optional


class StoreError(Exception):
    """Base exception for endpoint store errors."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "store_error"


class InvalidFileNameError(StoreError):
    """Raised when a file name is empty or lacks the .json suffix."""

    def __init__(self, message: str, file_name: Optional[str] = None):
        super().__init__(message, "invalid_file_name")
        self.file_name = file_name


class StoreWriteError(StoreError):
    """Raised when a group or index file cannot be written."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, "store_write_error")
        self.path = path
