"""Role-change notifications by email (request to admin, approval to user)."""

from __future__ import annotations

from app.application.dtos.auth import AuthUser
from app.application.dtos.email import EmailMessage
from app.application.interfaces.services import IEmailSender
from app.application.services.data_access import DataAccess
from app.application.use_cases.profiles import profile_query
from app.domain.enums import UserRole
from app.domain.exceptions import (
    AuthRequiredException,
    PermissionDeniedException,
    UpstreamFailureException,
    ValidationException,
)
from app.infrastructure.external.email.templates import role_approval_email, role_request_email
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

APPROVABLE_ROLES = (UserRole.PROPERTY_OWNER.value, UserRole.ADMIN.value)


class NotificationService:
    """Builds role emails eagerly and delivers them (usually in the background)."""

    def __init__(
        self,
        data: DataAccess,
        sender: IEmailSender,
        admin_email: str,
        app_url: str,
    ) -> None:
        self.data = data
        self.sender = sender
        self.admin_email = admin_email
        self.app_url = app_url.rstrip("/")

    def role_request_message(
        self,
        user: AuthUser | None,
        user_name: str | None = None,
        business_name: str | None = None,
        business_type: str | None = None,
        additional_info: str | None = None,
    ) -> EmailMessage:
        """Email asking the admin to make the caller a property owner."""
        if user is None:
            raise AuthRequiredException()
        if not user.email:
            raise ValidationException("Your account has no email address", field="user_email")
        if not self.admin_email:
            raise ValidationException("No admin email is configured", field="admin_email")
        return role_request_email(
            admin_email=self.admin_email,
            user_email=user.email,
            user_name=user_name,
            business_name=business_name,
            business_type=business_type,
            additional_info=additional_info,
            dashboard_url=f"{self.app_url}/dashboard?tab=users",
        )

    async def role_approval_message(
        self,
        admin: AuthUser | None,
        user_email: str,
        user_name: str | None,
        new_role: str,
    ) -> EmailMessage:
        """Email telling a user their role upgrade was approved. Admins only."""
        if admin is None:
            raise AuthRequiredException()
        if not user_email:
            raise ValidationException("User email is required", field="user_email")
        if new_role not in APPROVABLE_ROLES:
            raise ValidationException(
                f"new_role must be one of {list(APPROVABLE_ROLES)}", field="new_role"
            )
        profile = (await self.data.fetch(profile_query(admin.id))).unwrap()
        if profile.get("role") != UserRole.ADMIN.value:
            raise PermissionDeniedException("role_approval", "send")
        return role_approval_email(
            user_email=user_email,
            user_name=user_name,
            new_role=new_role,
            dashboard_url=f"{self.app_url}/dashboard",
        )

    async def send(self, message: EmailMessage) -> None:
        await self.sender.send(message)

    async def deliver(self, message: EmailMessage) -> bool:
        """Background delivery: a relay failure is logged, not raised to the client."""
        try:
            await self.sender.send(message)
        except UpstreamFailureException as exc:
            logger.error("Email to %s not delivered: %s", message.to, exc.message)
            return False
        return True
