"""Role notification API schemas."""

from pydantic import BaseModel, EmailStr, Field


class RoleRequestBody(BaseModel):
    """Ask the admin to upgrade the caller to property owner."""

    user_name: str | None = Field(default=None, max_length=200)
    business_name: str | None = Field(default=None, max_length=200)
    business_type: str | None = Field(default=None, max_length=100)
    additional_info: str | None = Field(default=None, max_length=5000)


class RoleApprovalBody(BaseModel):
    """Tell a user their role upgrade was approved (admin only)."""

    user_email: EmailStr
    user_name: str | None = Field(default=None, max_length=200)
    new_role: str = Field(..., min_length=1, max_length=32)


class NotificationAccepted(BaseModel):
    queued: bool = True
    to: str
