"""Profile API: own profile, avatar upload, public profile by id."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Request, UploadFile

from app.api.v1.dependencies import CurrentUser, get_profile_service
from app.application.use_cases import ProfileService
from app.core.limiter import limit_upload, limit_writes
from app.schemas.profile import ProfileResponse, ProfileUpdateRequest

router = APIRouter()

Profiles = Annotated[ProfileService, Depends(get_profile_service)]


@router.get("/me", response_model=ProfileResponse)
async def my_profile(user: CurrentUser, profiles: Profiles):
    return await profiles.get_profile(user.id)


@router.patch("/me", response_model=ProfileResponse)
@limit_writes
async def update_my_profile(
    request: Request,
    body: ProfileUpdateRequest,
    user: CurrentUser,
    profiles: Profiles,
):
    return await profiles.update_profile(user, body.model_dump(exclude_unset=True))


@router.post("/me/avatar", response_model=ProfileResponse)
@limit_upload
async def upload_avatar(
    request: Request,
    user: CurrentUser,
    profiles: Profiles,
    file: UploadFile = File(...),
):
    """Upload a new profile photo (JPEG, PNG, WebP or GIF)."""
    data = await file.read()
    return await profiles.upload_avatar(
        user, data, file.content_type or "application/octet-stream", file.filename
    )


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(user_id: str, _: CurrentUser, profiles: Profiles):
    return await profiles.get_profile(user_id)
