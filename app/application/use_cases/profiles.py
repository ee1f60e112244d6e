"""User profiles: read, self-service update and avatar upload."""

from __future__ import annotations

import mimetypes
from typing import Any

from app.application.dtos.auth import AuthUser
from app.application.interfaces.services import IStorageService
from app.application.services.data_access import DataAccess
from app.application.use_cases.images import ImageUrlService
from app.core.constants import TABLE_PROFILES
from app.domain.exceptions import AuthRequiredException, ValidationException
from app.domain.value_objects import QueryDescriptor, QueryFilter
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now_iso
from app.shared.utils.generators import object_name
from app.shared.utils.sanitization import InputSanitizer

logger = get_logger(__name__)

# Profile columns a user may edit on their own profile
EDITABLE_FIELDS = frozenset(
    {
        "full_name",
        "phone",
        "bio",
        "location",
        "business_name",
        "business_type",
        "website",
    }
)

IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/webp", "image/gif"})


def profile_query(user_id: str) -> QueryDescriptor:
    return QueryDescriptor(
        table=TABLE_PROFILES,
        filters=[QueryFilter("id", "eq", user_id)],
        single=True,
    )


class ProfileService:
    def __init__(
        self,
        data: DataAccess,
        storage: IStorageService,
        images: ImageUrlService,
        bucket: str = "profile-images",
        max_upload_size: int = 10 * 1024 * 1024,
    ) -> None:
        self.data = data
        self.storage = storage
        self.images = images
        self.bucket = bucket
        self.max_upload_size = max_upload_size

    async def get_profile(self, user_id: str) -> dict[str, Any]:
        """Profile row plus a signed avatar URL (profile_image_url)."""
        if not user_id:
            raise ValidationException("User id is required", field="id")
        profile = dict((await self.data.fetch(profile_query(user_id))).unwrap())
        profile["profile_image_url"] = await self.images.profile_image_url(
            user_id, profile.get("profile_image")
        )
        return profile

    async def update_profile(self, user: AuthUser | None, changes: dict[str, Any]) -> dict[str, Any]:
        """Upsert the caller's own profile with the editable fields in changes.

        Raises:
            AuthRequiredException: No signed-in user.
            ValidationException: No editable field supplied.
        """
        if user is None:
            raise AuthRequiredException()
        values = InputSanitizer.sanitize_dict(
            {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
        )
        if not values:
            raise ValidationException(
                f"No editable fields supplied; allowed: {sorted(EDITABLE_FIELDS)}", field="body"
            )
        row = {
            "id": user.id,
            **values,
            "updated_at": utc_now_iso(),
        }
        if user.email:
            row.setdefault("email", user.email)
        result = await self.data.mutate(
            lambda: self.data.data_api.insert(TABLE_PROFILES, row, upsert=True),
            [TABLE_PROFILES],
        )
        rows = result.unwrap()
        return rows[0] if rows else row

    async def upload_avatar(
        self,
        user: AuthUser | None,
        data: bytes,
        content_type: str,
        filename: str | None = None,
    ) -> dict[str, Any]:
        """Store a new avatar under <user_id>/ and point the profile at it.

        Returns:
            The updated profile row with profile_image_url set.
        """
        if user is None:
            raise AuthRequiredException()
        if not data:
            raise ValidationException("File is empty", field="file")
        if len(data) > self.max_upload_size:
            raise ValidationException(
                f"File exceeds the {self.max_upload_size // (1024 * 1024)}MB limit", field="file"
            )
        if content_type not in IMAGE_TYPES:
            raise ValidationException(
                f"Unsupported image type {content_type!r}", field="file"
            )
        extension = (filename or "").rsplit(".", 1)[-1] if filename and "." in filename else None
        extension = extension or (mimetypes.guess_extension(content_type) or "").lstrip(".")
        path = f"{user.id}/{object_name(extension)}"
        upload = await self.storage.upload(self.bucket, path, data, content_type, upsert=True)

        values = {"profile_image": path, "updated_at": utc_now_iso()}
        result = await self.data.mutate(
            lambda: self.data.data_api.update(
                TABLE_PROFILES, values, [QueryFilter("id", "eq", user.id)]
            ),
            [TABLE_PROFILES],
        )
        rows = result.unwrap()
        self.images.forget_profile_images()
        logger.info("Avatar uploaded for %s", user.id)
        profile = dict(rows[0]) if rows else {"id": user.id, **values}
        profile["profile_image_url"] = upload.url
        return profile
