"""DTOs for object storage uploads."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UploadResult:
    """Uploaded object location and the URL clients should use to read it.

    url is the public URL for public buckets, otherwise a signed URL that
    expires after expires_in seconds.
    """

    bucket: str
    path: str
    url: str
    signed: bool = False
    expires_in: int | None = None
