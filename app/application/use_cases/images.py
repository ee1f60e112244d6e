"""Signed image URLs for property photos and profile avatars.

URLs are cached under named keys so repeated page loads reuse one signed
URL until the cache TTL (shorter than the signature lifetime) runs out.
"""

from __future__ import annotations

from typing import Any

from app.application.interfaces.services import IStorageService
from app.application.services.data_access import DataAccess
from app.domain.exceptions import UpstreamFailureException, ValidationException
from app.infrastructure.cache.keys import named_key
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

PROPERTY_IMAGE_KEY = "property_image_url"
PROFILE_IMAGE_KEY = "profile_image_url"


def normalize_property_image_path(owner_id: str, image_path: str) -> str:
    """Bare file names live under the owner's folder: 'a.jpg' -> '<owner_id>/a.jpg'."""
    return image_path if "/" in image_path else f"{owner_id}/{image_path}"


def newest_file(files: list[dict[str, Any]]) -> dict[str, Any] | None:
    """Pick the most recently created object from a storage listing."""
    named = [f for f in files if f.get("name")]
    if not named:
        return None
    return max(named, key=lambda f: f.get("created_at") or "")


class ImageUrlService:
    def __init__(
        self,
        data: DataAccess,
        storage: IStorageService,
        property_bucket: str = "property-images",
        profile_bucket: str = "profile-images",
        expires_in: int = 3600,
    ) -> None:
        self.data = data
        self.storage = storage
        self.property_bucket = property_bucket
        self.profile_bucket = profile_bucket
        self.expires_in = expires_in

    async def property_image_url(self, owner_id: str, image_path: str) -> str | None:
        """Signed URL for one property image; None when it cannot be signed."""
        if not owner_id or not image_path:
            return None
        path = normalize_property_image_path(owner_id, image_path)
        result = await self.data.fetch_with(
            named_key(PROPERTY_IMAGE_KEY, bucket=self.property_bucket, path=path),
            lambda: self.storage.create_signed_url(self.property_bucket, path, self.expires_in),
        )
        return result.value if result.ok else None

    async def property_image_urls(self, row: dict[str, Any]) -> list[str]:
        owner_id = row.get("owner_id") or ""
        urls = []
        for image in row.get("images") or []:
            url = await self.property_image_url(owner_id, image)
            if url:
                urls.append(url)
        return urls

    async def profile_image_url(self, user_id: str, image_path: str | None = None) -> str | None:
        """Signed avatar URL.

        Tries image_path first; when that is missing or cannot be signed,
        falls back to the newest file in the user's folder.
        """
        if not user_id:
            return None
        result = await self.data.fetch_with(
            named_key(PROFILE_IMAGE_KEY, user_id=user_id, path=image_path or ""),
            lambda: self._resolve_profile_image(user_id, image_path),
        )
        return result.value if result.ok else None

    async def _resolve_profile_image(self, user_id: str, image_path: str | None) -> str | None:
        if image_path:
            try:
                return await self.storage.create_signed_url(
                    self.profile_bucket, image_path, self.expires_in
                )
            except (UpstreamFailureException, ValidationException) as exc:
                logger.info(
                    "Avatar %s not signable (%s); looking for newest upload", image_path, exc.message
                )
        latest = newest_file(await self.storage.list(self.profile_bucket, user_id))
        if latest is None:
            return None
        return await self.storage.create_signed_url(
            self.profile_bucket, f"{user_id}/{latest['name']}", self.expires_in
        )

    def forget_profile_images(self) -> int:
        """Drop cached avatar URLs (after a new upload)."""
        return self.data.invalidate(PROFILE_IMAGE_KEY)
