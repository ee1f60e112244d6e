"""Infrastructure exceptions for storage and external operations.

Storage errors extend UpstreamFailureException so presentation can map
them to HTTP responses consistently.
"""

from app.domain.exceptions import UpstreamFailureException


class StorageException(UpstreamFailureException):
    """Base exception for storage operations."""

    def __init__(
        self,
        message: str,
        file_path: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__("storage", message, status_code)
        self.details["file_path"] = file_path


class StorageUploadError(StorageException):
    """Object upload failed."""

    def __init__(self, file_path: str, reason: str, status_code: int | None = None) -> None:
        super().__init__(f"upload of {file_path} failed ({reason})", file_path, status_code)


class StorageSignedUrlError(StorageException):
    """Signed URL could not be created (missing object or rejected request)."""

    def __init__(self, file_path: str, reason: str, status_code: int | None = None) -> None:
        super().__init__(f"signing {file_path} failed ({reason})", file_path, status_code)
