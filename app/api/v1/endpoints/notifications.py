"""Role notification emails. Messages are built in the request (so bad input
fails fast) and sent after the response in a background task."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from app.api.v1.dependencies import CurrentUser, get_notification_service
from app.application.use_cases import NotificationService
from app.core.limiter import limit_email
from app.schemas.notification import NotificationAccepted, RoleApprovalBody, RoleRequestBody

router = APIRouter()

Notifications = Annotated[NotificationService, Depends(get_notification_service)]


@router.post("/role-request", response_model=NotificationAccepted, status_code=202)
@limit_email
async def send_role_request(
    request: Request,
    body: RoleRequestBody,
    background_tasks: BackgroundTasks,
    user: CurrentUser,
    notifications: Notifications,
) -> NotificationAccepted:
    """Email the admin asking to upgrade the caller to property owner."""
    message = notifications.role_request_message(
        user,
        user_name=body.user_name,
        business_name=body.business_name,
        business_type=body.business_type,
        additional_info=body.additional_info,
    )
    background_tasks.add_task(notifications.deliver, message)
    return NotificationAccepted(to=message.to)


@router.post("/role-approval", response_model=NotificationAccepted, status_code=202)
@limit_email
async def send_role_approval(
    request: Request,
    body: RoleApprovalBody,
    background_tasks: BackgroundTasks,
    user: CurrentUser,
    notifications: Notifications,
) -> NotificationAccepted:
    """Email a user that their role upgrade was approved (admins only)."""
    message = await notifications.role_approval_message(
        user, str(body.user_email), body.user_name, body.new_role
    )
    background_tasks.add_task(notifications.deliver, message)
    return NotificationAccepted(to=message.to)
