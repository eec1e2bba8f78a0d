from typing import Optional


class DocHubError(Exception):
    """Base error; carries the HTTP status used when it reaches a route."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidInputError(DocHubError):
    """Missing or malformed request input (files, tool id, options)."""

    status_code = 400


class InvalidToolError(DocHubError):
    """Unknown tool id, or options a tool refuses at construction time."""

    status_code = 400


class ProcessingError(DocHubError):
    """A processor failed while transforming bytes."""

    status_code = 500


class StoredFileNotFoundError(DocHubError):
    status_code = 404


class StorageError(DocHubError):
    status_code = 500
