"""Managed object storage over the storage REST API.

Objects are addressed by bucket and path. Public buckets are read through
a permanent public URL; private buckets through signed URLs that expire.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from app.application.dtos.storage import UploadResult
from app.domain.exceptions import UpstreamFailureException, ValidationException
from app.infrastructure.exceptions import StorageSignedUrlError, StorageUploadError
from app.infrastructure.external.http import request
from app.shared.telemetry.logging import get_logger
from app.shared.utils.sanitization import InputSanitizer

logger = get_logger(__name__)

SERVICE = "storage"


class SupabaseStorage:
    """IStorageService implementation for the managed storage service."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        http_client: httpx.AsyncClient,
        signed_url_expiry: int = 3600,
    ) -> None:
        """Initialize storage client.

        Args:
            base_url: Storage root, e.g. https://<project>.supabase.co/storage/v1.
            api_key: Service key.
            http_client: Shared async client.
            signed_url_expiry: Default signed URL lifetime in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.signed_url_expiry = signed_url_expiry
        self._client = http_client
        self._headers = {"apikey": api_key, "Authorization": f"Bearer {api_key}"}

    def _object_path(self, bucket: str, path: str) -> str:
        try:
            InputSanitizer.sanitize_identifier(bucket)
            InputSanitizer.sanitize_storage_path(path)
        except ValueError as exc:
            raise ValidationException(str(exc), field="path") from exc
        return f"{quote(bucket)}/{quote(path)}"

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        *,
        upsert: bool = False,
        public: bool = False,
    ) -> UploadResult:
        """Upload bytes to bucket/path.

        Returns the public URL when public is True, otherwise a signed URL.

        Raises:
            ValidationException: Empty data or unsafe path.
            StorageUploadError: Upload rejected or transport failure.
        """
        if not data:
            raise ValidationException("File is empty", field="file")
        object_path = self._object_path(bucket, path)
        try:
            await request(
                self._client,
                SERVICE,
                "POST",
                f"{self.base_url}/object/{object_path}",
                content=data,
                headers={
                    **self._headers,
                    "Content-Type": content_type or "application/octet-stream",
                    "x-upsert": "true" if upsert else "false",
                },
            )
        except UpstreamFailureException as exc:
            raise StorageUploadError(f"{bucket}/{path}", exc.message, exc.status_code) from exc
        logger.info("Uploaded %s/%s (%s bytes)", bucket, path, len(data))
        if public:
            return UploadResult(bucket=bucket, path=path, url=self.public_url(bucket, path))
        url = await self.create_signed_url(bucket, path)
        return UploadResult(
            bucket=bucket,
            path=path,
            url=url,
            signed=True,
            expires_in=self.signed_url_expiry,
        )

    async def create_signed_url(
        self, bucket: str, path: str, expires_in: int | None = None
    ) -> str:
        """Return a signed URL valid for expires_in seconds.

        Raises:
            StorageSignedUrlError: Object missing or request rejected.
        """
        object_path = self._object_path(bucket, path)
        try:
            response = await request(
                self._client,
                SERVICE,
                "POST",
                f"{self.base_url}/object/sign/{object_path}",
                json={"expiresIn": expires_in or self.signed_url_expiry},
                headers=self._headers,
            )
        except UpstreamFailureException as exc:
            raise StorageSignedUrlError(f"{bucket}/{path}", exc.message, exc.status_code) from exc
        body = response.json() or {}
        signed = body.get("signedURL") or body.get("signedUrl")
        if not signed:
            raise StorageSignedUrlError(f"{bucket}/{path}", "no URL in response")
        return signed if signed.startswith("http") else f"{self.base_url}{signed}"

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/object/public/{self._object_path(bucket, path)}"

    async def list(self, bucket: str, prefix: str) -> list[dict[str, Any]]:
        """List objects under prefix, newest first (max 100)."""
        InputSanitizer.sanitize_identifier(bucket)
        response = await request(
            self._client,
            SERVICE,
            "POST",
            f"{self.base_url}/object/list/{quote(bucket)}",
            json={
                "prefix": prefix,
                "limit": 100,
                "offset": 0,
                "sortBy": {"column": "created_at", "order": "desc"},
            },
            headers=self._headers,
        )
        return response.json() or []

    async def remove(self, bucket: str, paths: list[str]) -> list[dict[str, Any]]:
        """Delete objects at paths."""
        if not paths:
            return []
        for path in paths:
            self._object_path(bucket, path)
        response = await request(
            self._client,
            SERVICE,
            "DELETE",
            f"{self.base_url}/object/{quote(bucket)}",
            json={"prefixes": paths},
            headers=self._headers,
        )
        return response.json() or []
