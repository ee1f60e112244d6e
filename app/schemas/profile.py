"""Profile API schemas."""

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import RowModel


class ProfileUpdateRequest(BaseModel):
    """Editable profile fields (partial)."""

    model_config = ConfigDict(extra="forbid")

    full_name: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=50)
    bio: str | None = Field(default=None, max_length=2000)
    location: str | None = Field(default=None, max_length=255)
    business_name: str | None = Field(default=None, max_length=200)
    business_type: str | None = Field(default=None, max_length=100)
    website: str | None = Field(default=None, max_length=500)


class ProfileResponse(RowModel):
    id: str
    full_name: str | None = None
    email: str | None = None
    role: str | None = None
    profile_image: str | None = None
    profile_image_url: str | None = None
