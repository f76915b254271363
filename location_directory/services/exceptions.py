# location_directory/services/exceptions.py
"""
Errors raised by the location directory.

All of them are caller-recoverable validation failures. Storage faults are
never wrapped in these classes; they propagate unchanged.
"""
from fastapi import status


class LocationDirectoryError(Exception):
    """Base class; carries the HTTP status the API layer answers with."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LocationNotFoundError(LocationDirectoryError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, field: str, value):
        super().__init__(f"{resource} not found with {field}: {value}")
        self.field = field
        self.value = value


class LocationAlreadyExistsError(LocationDirectoryError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, resource: str, field: str, value):
        super().__init__(f"{resource} already exists with {field}: {value}")
        self.field = field
        self.value = value


class InvalidHierarchyError(LocationDirectoryError):
    """Level-order violation, missing/unexpected parent, or delete-with-children."""

    status_code = status.HTTP_400_BAD_REQUEST
