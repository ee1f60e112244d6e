"""Profiles, avatar upload and signed image URLs."""

import pytest

from app.application.use_cases import ImageUrlService, ProfileService
from app.application.use_cases.images import newest_file, normalize_property_image_path
from app.domain.exceptions import AuthRequiredException, ValidationException
from tests.fakes import OWNER, SEEKER, FakeStorage


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def images(data_access, storage) -> ImageUrlService:
    return ImageUrlService(data_access, storage)


@pytest.fixture
def profiles(data_access, storage, images) -> ProfileService:
    return ProfileService(data_access, storage, images, max_upload_size=1024)


def test_property_image_path_normalization() -> None:
    assert normalize_property_image_path("o1", "a.jpg") == "o1/a.jpg"
    assert normalize_property_image_path("o1", "other/a.jpg") == "other/a.jpg"


def test_newest_file() -> None:
    files = [
        {"name": "a.png", "created_at": "2024-01-01"},
        {"name": "b.png", "created_at": "2024-03-01"},
        {"name": None},
    ]
    assert newest_file(files)["name"] == "b.png"
    assert newest_file([]) is None


async def test_property_image_urls_are_cached(images: ImageUrlService, storage: FakeStorage) -> None:
    row = {"owner_id": "owner-1", "images": ["front.jpg", "gone.jpg"]}
    storage.missing.add("owner-1/gone.jpg")
    urls = await images.property_image_urls(row)
    assert urls == ["https://storage.test/sign/property-images/owner-1/front.jpg?token=t"]
    await images.property_image_urls(row)
    assert storage.sign_calls.count(("property-images", "owner-1/front.jpg")) == 1


async def test_avatar_falls_back_to_newest_upload(images: ImageUrlService, storage: FakeStorage) -> None:
    storage.missing.add("u1/old.png")
    storage.listing[("profile-images", "u1")] = [
        {"name": "first.png", "created_at": "2024-01-01"},
        {"name": "latest.png", "created_at": "2024-02-01"},
    ]
    url = await images.profile_image_url("u1", "u1/old.png")
    assert url.endswith("profile-images/u1/latest.png?token=t")
    assert await images.profile_image_url("") is None


async def test_get_profile_adds_image_url(profiles: ProfileService) -> None:
    profile = await profiles.get_profile(SEEKER.id)
    assert profile["email"] == SEEKER.email
    assert profile["profile_image_url"] is None


async def test_update_profile_upserts_editable_fields(profiles: ProfileService, data_api) -> None:
    updated = await profiles.update_profile(SEEKER, {"full_name": "Sam Seeker", "role": "admin"})
    assert updated["full_name"] == "Sam Seeker"
    assert updated["role"] == "property_seeker"
    assert ("upsert", "profiles") in data_api.calls
    assert (await profiles.get_profile(SEEKER.id))["full_name"] == "Sam Seeker"

    with pytest.raises(ValidationException):
        await profiles.update_profile(SEEKER, {"role": "admin"})
    with pytest.raises(AuthRequiredException):
        await profiles.update_profile(None, {"full_name": "x"})


async def test_upload_avatar(profiles: ProfileService, storage: FakeStorage) -> None:
    profile = await profiles.upload_avatar(OWNER, b"\x89PNG....", "image/png", "me.PNG")
    path = profile["profile_image"]
    assert path.startswith(f"{OWNER.id}/") and path.endswith(".png")
    assert ("profile-images", path) in storage.objects
    assert profile["profile_image_url"].endswith(f"{path}?token=t")


@pytest.mark.parametrize(
    ("data", "content_type"),
    [(b"", "image/png"), (b"x" * 2048, "image/png"), (b"%PDF", "application/pdf")],
)
async def test_upload_avatar_rejects_bad_files(profiles: ProfileService, storage, data, content_type) -> None:
    with pytest.raises(ValidationException):
        await profiles.upload_avatar(OWNER, data, content_type, "file")
    assert storage.objects == {}
